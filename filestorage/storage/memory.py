"""
In-memory storage implementation.

Keeps files and directories in a dict keyed by canonical path. Meant as a
test double and for ephemeral storage; nothing survives the process.
"""
import posixpath
from dataclasses import dataclass, replace
from typing import AsyncIterator, Callable

from filestorage.schemas.options import (
    ChecksumOptions,
    CopyFileOptions,
    CreateDirectoryOptions,
    ListOptions,
    MiscellaneousOptions,
    MoveFileOptions,
    PublicUrlOptions,
    TemporaryUrlOptions,
    VisibilityOptions,
    WriteOptions,
)
from filestorage.schemas.stat import DirectoryInfo, FileInfo, StatEntry
from filestorage.storage.base import StorageAdapter
from filestorage.storage.exceptions import ChecksumIsNotAvailable, FileWasNotFound
from filestorage.utils.abort import maybe_abort
from filestorage.utils.datetime import now_ms
from filestorage.utils.streams import CHUNK_SIZE
from filestorage.visibility import Visibility

TimestampResolver = Callable[[], int]


@dataclass(frozen=True)
class _FileEntry:
    path: str
    contents: bytes
    last_modified_ms: int
    visibility: str | None = None
    mime_type: str | None = None


@dataclass(frozen=True)
class _DirectoryEntry:
    path: str
    visibility: str | None = None


class InMemoryStorageAdapter(StorageAdapter):
    """
    Dict-backed storage adapter.

    Args:
        timestamp_resolver: Callable returning "now" in epoch milliseconds,
            replaceable for deterministic tests

    Checksums are reported as unavailable, so FileStorage computes them from
    the file contents.
    """

    def __init__(self, timestamp_resolver: TimestampResolver = now_ms):
        self.timestamp_resolver = timestamp_resolver
        self._entries: dict[str, _FileEntry | _DirectoryEntry] = {}

    def delete_everything(self) -> None:
        self._entries = {}

    async def write(self, path: str, contents: AsyncIterator[bytes], options: WriteOptions) -> None:
        maybe_abort(options.abort_signal)
        chunks = []

        async for chunk in contents:
            maybe_abort(options.abort_signal)
            chunks.append(chunk)

        # last checkpoint before the file becomes visible
        maybe_abort(options.abort_signal)
        self._ensure_parent_directories(path, options)
        self._entries[path] = _FileEntry(
            path=path,
            contents=b"".join(chunks),
            last_modified_ms=self.timestamp_resolver(),
            visibility=options.visibility,
            mime_type=options.mime_type,
        )

    async def read(self, path: str, options: MiscellaneousOptions) -> AsyncIterator[bytes]:
        entry = self._file_entry(path)
        return self._stream(entry.contents, options)

    async def _stream(self, contents: bytes, options: MiscellaneousOptions) -> AsyncIterator[bytes]:
        for offset in range(0, len(contents), CHUNK_SIZE):
            maybe_abort(options.abort_signal)
            yield contents[offset:offset + CHUNK_SIZE]

    async def delete_file(self, path: str, options: MiscellaneousOptions) -> None:
        maybe_abort(options.abort_signal)
        if isinstance(self._entries.get(path), _FileEntry):
            del self._entries[path]

    async def create_directory(self, path: str, options: CreateDirectoryOptions) -> None:
        maybe_abort(options.abort_signal)
        if path == "":
            return

        self._ensure_parent_directories(path, options)
        if not isinstance(self._entries.get(path), _DirectoryEntry):
            self._entries[path] = _DirectoryEntry(path=path, visibility=options.directory_visibility)

    async def delete_directory(self, path: str, options: MiscellaneousOptions) -> None:
        maybe_abort(options.abort_signal)
        prefix = self._directory_prefix(path)

        for entry_path in [p for p in self._entries if p.startswith(prefix) or p == path]:
            del self._entries[entry_path]

    async def copy_file(self, from_path: str, to_path: str, options: CopyFileOptions) -> None:
        maybe_abort(options.abort_signal)
        source = self._file_entry(from_path)

        if options.visibility is not None:
            visibility = options.visibility
        elif options.retain_visibility:
            visibility = source.visibility
        else:
            visibility = None

        self._ensure_parent_directories(to_path, options)
        self._entries[to_path] = replace(
            source,
            path=to_path,
            visibility=visibility,
            last_modified_ms=self.timestamp_resolver(),
        )

    async def move_file(self, from_path: str, to_path: str, options: MoveFileOptions) -> None:
        await self.copy_file(from_path, to_path, options)
        if from_path != to_path:
            del self._entries[from_path]

    async def stat(self, path: str, options: MiscellaneousOptions) -> StatEntry:
        maybe_abort(options.abort_signal)
        entry = self._entries.get(path)

        if entry is None:
            raise FileWasNotFound.at_location(path)

        return self._to_stat_entry(entry)

    async def list(self, path: str, options: ListOptions) -> AsyncIterator[StatEntry]:
        prefix = self._directory_prefix(path)

        # snapshot, the dict may change while the listing is consumed
        for entry in list(self._entries.values()):
            maybe_abort(options.abort_signal)
            if not entry.path.startswith(prefix):
                continue
            if not options.deep and "/" in entry.path[len(prefix):]:
                continue
            yield self._to_stat_entry(entry)

    async def change_visibility(self, path: str, visibility: str, options: MiscellaneousOptions) -> None:
        maybe_abort(options.abort_signal)
        entry = self._entries.get(path)

        if entry is None:
            raise FileWasNotFound.at_location(path)

        self._entries[path] = replace(entry, visibility=visibility)

    async def visibility(self, path: str, options: MiscellaneousOptions) -> str:
        maybe_abort(options.abort_signal)
        entry = self._entries.get(path)

        if entry is None:
            raise FileWasNotFound.at_location(path)

        return entry.visibility or Visibility.PUBLIC

    async def file_exists(self, path: str, options: MiscellaneousOptions) -> bool:
        return isinstance(self._entries.get(path), _FileEntry)

    async def directory_exists(self, path: str, options: MiscellaneousOptions) -> bool:
        return path == "" or isinstance(self._entries.get(path), _DirectoryEntry)

    async def public_url(self, path: str, options: PublicUrlOptions) -> str:
        raise NotImplementedError("In-memory storage has no public URLs")

    async def temporary_url(self, path: str, options: TemporaryUrlOptions) -> str:
        raise NotImplementedError("In-memory storage has no temporary URLs")

    async def checksum(self, path: str, options: ChecksumOptions) -> str:
        self._file_entry(path)

        raise ChecksumIsNotAvailable.checksum_not_supported(
            options.algo or "unknown",
            context={"path": path},
        )

    def _file_entry(self, path: str) -> _FileEntry:
        entry = self._entries.get(path)

        if not isinstance(entry, _FileEntry):
            raise FileWasNotFound.at_location(path)

        return entry

    def _ensure_parent_directories(self, path: str, options: VisibilityOptions | CreateDirectoryOptions) -> None:
        parent = posixpath.dirname(path)

        while parent not in ("", ".") and parent not in self._entries:
            self._entries[parent] = _DirectoryEntry(path=parent, visibility=options.directory_visibility)
            parent = posixpath.dirname(parent)

    @staticmethod
    def _directory_prefix(path: str) -> str:
        return f"{path}/" if path else ""

    @staticmethod
    def _to_stat_entry(entry: _FileEntry | _DirectoryEntry) -> StatEntry:
        if isinstance(entry, _DirectoryEntry):
            return DirectoryInfo(path=entry.path, visibility=entry.visibility)

        return FileInfo(
            path=entry.path,
            last_modified_ms=entry.last_modified_ms,
            visibility=entry.visibility,
            size=len(entry.contents),
            mime_type=entry.mime_type,
        )
