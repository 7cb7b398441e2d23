"""
Abstract base class for storage adapters.

This module defines the interface that all storage backends must implement.
The FileStorage façade hands adapters canonical paths (see
``filestorage.utils.paths``) and merged option bags; adapters map the paths
into their own namespace, usually with a ``PathPrefixer``, and strip that
prefix again from every path they return.
"""
import mimetypes
from abc import ABC, abstractmethod
from typing import AsyncIterator

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
    WriteOptions,
)
from filestorage.schemas.stat import FileInfo, StatEntry


class StorageAdapter(ABC):
    """
    Abstract base class for storage adapters.

    All backend implementations (local filesystem, in-memory, object
    stores, ...) implement these methods. Adapters may raise any exception;
    the façade translates failures into the typed error taxonomy.

    Adapters can wrap other adapters: anything implementing this interface
    can be handed to another adapter's constructor and delegated to.

    Optional capability:
        ``async def prepare_upload(path, options: UploadRequestOptions) -> UploadRequest``
        Adapters that can hand out client-direct upload requests define
        this method; the façade checks for it at call time.
    """

    @abstractmethod
    async def write(self, path: str, contents: AsyncIterator[bytes], options: WriteOptions) -> None:
        """
        Persist exactly the bytes of ``contents`` at ``path``.

        Args:
            path: Canonical file path
            contents: Async iterator yielding file chunks
            options: Merged write options (visibility, mime type, ...)

        Implied parent directories are created unless the backend is flat.
        Partially written files must not remain reachable when the write is
        cancelled.
        """
        pass

    @abstractmethod
    def read(self, path: str, options: MiscellaneousOptions) -> AsyncIterator[bytes]:
        """
        Stream the bytes stored at ``path``.

        Typically implemented as an async generator. Missing files raise
        ``FileWasNotFound`` (or ``FileNotFoundError``), either immediately or
        while streaming.
        """
        pass

    @abstractmethod
    async def delete_file(self, path: str, options: MiscellaneousOptions) -> None:
        """Delete a file. Deleting a file that does not exist is not an error."""
        pass

    @abstractmethod
    async def create_directory(self, path: str, options: CreateDirectoryOptions) -> None:
        """Create a directory (idempotent). Flat backends may no-op."""
        pass

    @abstractmethod
    async def delete_directory(self, path: str, options: MiscellaneousOptions) -> None:
        """Delete a directory with all of its descendants (idempotent)."""
        pass

    @abstractmethod
    async def copy_file(self, from_path: str, to_path: str, options: CopyFileOptions) -> None:
        """
        Copy a file.

        Fails when ``from_path`` does not exist. With ``retain_visibility``
        and no explicit ``visibility`` the destination gets the source
        visibility.
        """
        pass

    @abstractmethod
    async def move_file(self, from_path: str, to_path: str, options: MoveFileOptions) -> None:
        """Move a file. Same contract as ``copy_file``; the source is removed."""
        pass

    @abstractmethod
    async def stat(self, path: str, options: MiscellaneousOptions) -> StatEntry:
        """
        Get metadata for a file or directory.

        Raises:
            Any exception when the path does not exist
        """
        pass

    @abstractmethod
    def list(self, path: str, options: ListOptions) -> AsyncIterator[StatEntry]:
        """
        Lazily list the entries below a directory.

        Shallow listings (``options.deep`` falsy) yield immediate children
        only. Deep listings yield every descendant and a directory entry for
        every intermediate level, also on backends without native
        directories. An entry present in both listings is identical in both.
        """
        pass

    @abstractmethod
    async def change_visibility(self, path: str, visibility: str, options: MiscellaneousOptions) -> None:
        """Set visibility. Backends without permissions may raise."""
        pass

    @abstractmethod
    async def visibility(self, path: str, options: MiscellaneousOptions) -> str:
        """Get visibility. Backends without permissions may raise."""
        pass

    @abstractmethod
    async def file_exists(self, path: str, options: MiscellaneousOptions) -> bool:
        """Return False, never raise, when the file does not exist."""
        pass

    @abstractmethod
    async def directory_exists(self, path: str, options: MiscellaneousOptions) -> bool:
        """Return False, never raise, when the directory does not exist."""
        pass

    @abstractmethod
    async def public_url(self, path: str, options: PublicUrlOptions) -> str:
        pass

    @abstractmethod
    async def temporary_url(self, path: str, options: TemporaryUrlOptions) -> str:
        """URL usable for unauthenticated retrieval until ``options.expires_at``."""
        pass

    @abstractmethod
    async def checksum(self, path: str, options: ChecksumOptions) -> str:
        """
        Return a checksum of the file contents.

        Raises:
            ChecksumIsNotAvailable: When the backend cannot provide the
                requested algorithm; the façade then computes it itself
        """
        pass

    # Convenience derivations of stat()

    async def mime_type(self, path: str, options: MimeTypeOptions) -> str:
        """
        Resolve the mime-type of a file.

        Uses the mime-type reported by ``stat()`` and falls back to a lookup
        by file extension unless ``options.disallow_fallback`` is set.
        """
        stat = await self._stat_file(path, options)

        if stat.mime_type:
            return stat.mime_type

        if options.disallow_fallback:
            raise ValueError(f"No mime-type available for {path}")

        mime_type, _ = mimetypes.guess_type(path)
        if mime_type is None:
            raise ValueError(f"Unable to resolve mime-type for {path}")

        return mime_type

    async def last_modified(self, path: str, options: MiscellaneousOptions) -> int:
        stat = await self._stat_file(path, options)

        if stat.last_modified_ms is None:
            raise ValueError("Stat unexpectedly did not return last modified.")

        return stat.last_modified_ms

    async def file_size(self, path: str, options: MiscellaneousOptions) -> int:
        stat = await self._stat_file(path, options)

        if stat.size is None:
            raise ValueError("Stat unexpectedly did not return file size.")

        return stat.size

    async def _stat_file(self, path: str, options: MiscellaneousOptions) -> FileInfo:
        stat = await self.stat(path, options)

        if not stat.is_file:
            raise ValueError(f"Path {path} is not a file.")

        return stat
