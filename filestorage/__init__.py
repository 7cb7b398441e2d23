"""
Storage abstraction layer.

Application code talks to FileStorage; backends plug in as StorageAdapter
implementations.
"""
import warnings

from filestorage.file_storage import FileStorage
from filestorage.listing import DirectoryListing
from filestorage.schemas.config import ConfigurationOptions
from filestorage.schemas.options import (
    ChecksumOptions,
    CopyFileOptions,
    CreateDirectoryOptions,
    ListOptions,
    MimeTypeOptions,
    MiscellaneousOptions,
    MoveFileOptions,
    PublicUrlOptions,
    TemporaryUrlOptions,
    UploadRequestOptions,
    VisibilityOptions,
    WriteOptions,
)
from filestorage.schemas.stat import DirectoryInfo, FileInfo, StatEntry, is_directory, is_file
from filestorage.schemas.uploads import UploadRequest
from filestorage.storage.base import StorageAdapter
from filestorage.storage.exceptions import (
    FileStorageError,
    PathError,
    CorruptedPathDetected,
    PathTraversalDetected,
    ChecksumIsNotAvailable,
    FileWasNotFound,
    UnableToWriteFile,
    UnableToReadFile,
    UnableToDeleteFile,
    UnableToCreateDirectory,
    UnableToDeleteDirectory,
    UnableToCopyFile,
    UnableToMoveFile,
    UnableToGetStat,
    UnableToCheckFileExistence,
    UnableToCheckDirectoryExistence,
    UnableToListDirectory,
    UnableToSetVisibility,
    UnableToGetVisibility,
    UnableToGetPublicUrl,
    UnableToGetTemporaryUrl,
    UnableToGetChecksum,
    UnableToGetMimeType,
    UnableToGetLastModified,
    UnableToGetFileSize,
    UnableToPrepareUploadRequest,
    UploadPreparationNotSupported,
    error_to_message,
)
from filestorage.storage.local import LocalStorageAdapter
from filestorage.storage.memory import InMemoryStorageAdapter
from filestorage.uploads import PreparedUploadsAreNotSupported, PreparedUploadStrategy
from filestorage.urls import (
    BaseUrlPublicUrlGenerator,
    PublicUrlGenerator,
    TemporaryUrlGenerator,
    TemporaryUrlsAreNotSupported,
)
from filestorage.utils.abort import AbortController, AbortSignal, OperationAborted, OperationTimedOut
from filestorage.utils.datetime import normalize_expiry_to_datetime, normalize_expiry_to_milliseconds
from filestorage.utils.paths import PathNormalizer
from filestorage.utils.prefixer import PathPrefixer
from filestorage.utils.streams import checksum_from_stream, read_to_bytes, read_to_string
from filestorage.visibility import UnixVisibilityConversion, Visibility, VisibilityFallback

__all__ = [
    "FileStorage",
    "DirectoryListing",
    "ConfigurationOptions",
    "ChecksumOptions",
    "CopyFileOptions",
    "CreateDirectoryOptions",
    "ListOptions",
    "MimeTypeOptions",
    "MiscellaneousOptions",
    "MoveFileOptions",
    "PublicUrlOptions",
    "TemporaryUrlOptions",
    "UploadRequestOptions",
    "VisibilityOptions",
    "WriteOptions",
    "DirectoryInfo",
    "FileInfo",
    "StatEntry",
    "is_directory",
    "is_file",
    "UploadRequest",
    "StorageAdapter",
    "FileStorageError",
    "PathError",
    "CorruptedPathDetected",
    "PathTraversalDetected",
    "ChecksumIsNotAvailable",
    "FileWasNotFound",
    "UnableToWriteFile",
    "UnableToReadFile",
    "UnableToDeleteFile",
    "UnableToCreateDirectory",
    "UnableToDeleteDirectory",
    "UnableToCopyFile",
    "UnableToMoveFile",
    "UnableToGetStat",
    "UnableToCheckFileExistence",
    "UnableToCheckDirectoryExistence",
    "UnableToListDirectory",
    "UnableToSetVisibility",
    "UnableToGetVisibility",
    "UnableToGetPublicUrl",
    "UnableToGetTemporaryUrl",
    "UnableToGetChecksum",
    "UnableToGetMimeType",
    "UnableToGetLastModified",
    "UnableToGetFileSize",
    "UnableToPrepareUploadRequest",
    "UploadPreparationNotSupported",
    "error_to_message",
    "LocalStorageAdapter",
    "InMemoryStorageAdapter",
    "PreparedUploadsAreNotSupported",
    "PreparedUploadStrategy",
    "BaseUrlPublicUrlGenerator",
    "PublicUrlGenerator",
    "TemporaryUrlGenerator",
    "TemporaryUrlsAreNotSupported",
    "AbortController",
    "AbortSignal",
    "OperationAborted",
    "OperationTimedOut",
    "normalize_expiry_to_datetime",
    "normalize_expiry_to_milliseconds",
    "PathNormalizer",
    "PathPrefixer",
    "checksum_from_stream",
    "read_to_bytes",
    "read_to_string",
    "UnixVisibilityConversion",
    "Visibility",
    "VisibilityFallback",
]

_DEPRECATED_ALIASES = {
    "LocalFileStorage": ("LocalStorageAdapter", LocalStorageAdapter),
    "InMemoryFileStorage": ("InMemoryStorageAdapter", InMemoryStorageAdapter),
}


def __getattr__(name):
    if name in _DEPRECATED_ALIASES:
        replacement, value = _DEPRECATED_ALIASES[name]
        warnings.warn(
            f"{name} is deprecated, use {replacement} instead",
            DeprecationWarning,
            stacklevel=2,
        )
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
