"""
Storage-specific exceptions.

Every error raised by the FileStorage façade belongs to exactly one of the
operation families below. Adapter failures are never re-raised as-is: the
façade wraps them, keeping the original exception as ``cause`` (and as
``__cause__``) together with the arguments of the failed call in
``context``.
"""
from typing import Any

ErrorContext = dict[str, Any]


def error_to_message(error: BaseException | object) -> str:
    """Return a readable message for any raised value."""
    if isinstance(error, BaseException):
        message = str(error)
        return message if message else error.__class__.__name__
    return str(error)


class FileStorageError(Exception):
    """Base exception for storage operations."""

    code: str = "filestorage.unknown_error"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        self.context = dict(context or {})
        self.cause = cause
        self.was_aborted = False
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def because(
        cls,
        reason: str,
        *,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        return cls(f"{cls.summary}. Reason: {reason}", context, cause)

    summary = "Unable to perform the storage operation"


class PathError(FileStorageError):
    """Base for errors raised while normalizing a path."""

    def __init__(self, message: str, path: str):
        self.path = path
        super().__init__(message, {"path": path})


class CorruptedPathDetected(PathError):
    """Raised when a path contains control or other invisible characters."""

    code = "filestorage.corrupted_path_detected"

    @classmethod
    def unexpected_whitespace(cls, path: str) -> "CorruptedPathDetected":
        return cls(f"Corrupted path detected with unexpected whitespace: {path!r}", path)


class PathTraversalDetected(PathError):
    """Raised when resolving ``..`` segments would escape the root."""

    code = "filestorage.path_traversal_detected"

    @classmethod
    def for_path(cls, path: str) -> "PathTraversalDetected":
        return cls(f"Path traversal detected for: {path}", path)


class ChecksumIsNotAvailable(FileStorageError):
    """
    Raised by an adapter when it cannot provide a checksum natively.

    This is a recoverable signal: the façade catches it and computes the
    checksum itself from a full read of the file.
    """

    code = "filestorage.checksum_not_supported"

    def __init__(
        self,
        message: str,
        algo: str,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        self.algo = algo
        super().__init__(message, context, cause)

    @classmethod
    def checksum_not_supported(
        cls,
        algo: str,
        *,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ) -> "ChecksumIsNotAvailable":
        return cls(
            f'Checksum algo "{algo}" is not supported',
            algo,
            {**(context or {}), "algo": algo},
            cause,
        )


class FileWasNotFound(FileStorageError):
    """Raised by adapters (and read streams) when a file does not exist."""

    code = "filestorage.file_not_found"

    @classmethod
    def at_location(
        cls,
        path: str,
        *,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ) -> "FileWasNotFound":
        return cls(f"File was not found at location: {path}", {"path": path, **(context or {})}, cause)


class UnableToWriteFile(FileStorageError):
    code = "filestorage.unable_to_write_file"
    summary = "Unable to write the file"


class UnableToReadFile(FileStorageError):
    code = "filestorage.unable_to_read_file"
    summary = "Unable to read the file"

    @property
    def was_file_not_found(self) -> bool:
        return isinstance(self.cause, (FileWasNotFound, FileNotFoundError))


class UnableToDeleteFile(FileStorageError):
    code = "filestorage.unable_to_delete_file"
    summary = "Unable to delete file"


class UnableToCreateDirectory(FileStorageError):
    code = "filestorage.unable_to_create_directory"
    summary = "Unable to create directory"


class UnableToDeleteDirectory(FileStorageError):
    code = "filestorage.unable_to_delete_directory"
    summary = "Unable to delete directory"


class UnableToCopyFile(FileStorageError):
    code = "filestorage.unable_to_copy_file"
    summary = "Unable to copy file"


class UnableToMoveFile(FileStorageError):
    code = "filestorage.unable_to_move_file"
    summary = "Unable to move file"


class UnableToGetStat(FileStorageError):
    code = "filestorage.unable_to_get_stat"
    summary = "Unable to get stat"

    @classmethod
    def no_file_stat_resolved(cls, *, context: ErrorContext | None = None) -> "UnableToGetStat":
        return cls("Stat was not a file.", context)


class UnableToCheckFileExistence(FileStorageError):
    code = "filestorage.unable_to_check_file_existence"
    summary = "Unable to check file existence"


class UnableToCheckDirectoryExistence(FileStorageError):
    code = "filestorage.unable_to_check_directory_existence"
    summary = "Unable to check directory existence"


class UnableToListDirectory(FileStorageError):
    code = "filestorage.unable_to_list_directory_contents"
    summary = "Unable to list directory contents"

    @classmethod
    def already_consumed(cls, *, context: ErrorContext | None = None) -> "UnableToListDirectory":
        return cls("Directory listing was already consumed, listings are single-pass.", context)


class UnableToSetVisibility(FileStorageError):
    code = "filestorage.unable_to_set_visibility"
    summary = "Unable to set visibility"


class UnableToGetVisibility(FileStorageError):
    code = "filestorage.unable_to_get_visibility"
    summary = "Unable to get visibility"


class UnableToGetPublicUrl(FileStorageError):
    code = "filestorage.unable_to_get_public_url"
    summary = "Unable to get public URL"


class UnableToGetTemporaryUrl(FileStorageError):
    code = "filestorage.unable_to_get_temporary_url"
    summary = "Unable to get temporary URL"


class UnableToGetChecksum(FileStorageError):
    code = "filestorage.unable_to_get_checksum"
    summary = "Unable to get checksum"


class UnableToGetMimeType(FileStorageError):
    code = "filestorage.unable_to_get_mime_type"
    summary = "Unable to get mime-type"


class UnableToGetLastModified(FileStorageError):
    code = "filestorage.unable_to_get_last_modified"
    summary = "Unable to get last modified"


class UnableToGetFileSize(FileStorageError):
    code = "filestorage.unable_to_get_file_size"
    summary = "Unable to get file size"


class UnableToPrepareUploadRequest(FileStorageError):
    code = "filestorage.unable_to_prepare_upload_request"
    summary = "Unable to prepare upload request"


class UploadPreparationNotSupported(UnableToPrepareUploadRequest):
    """Raised when neither a strategy nor the adapter can prepare uploads."""

    code = "filestorage.upload_preparation_not_supported"

    @classmethod
    def for_adapter(cls, adapter: object, *, context: ErrorContext | None = None) -> "UploadPreparationNotSupported":
        return cls(
            f"Prepared uploads are not supported by {adapter.__class__.__name__}",
            context,
        )
