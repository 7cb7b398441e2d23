"""
FileStorage façade.

The single public entry point for storage operations. For every call it:

1. merges call-site options over the configured category defaults
2. derives a cancellation signal from ``timeout`` and ``abort_signal``
3. fails right away when that signal has already fired
4. normalizes every path argument
5. calls the adapter, cancelling the call when the signal fires
6. translates any failure into exactly one typed error per operation

Path errors (``CorruptedPathDetected``, ``PathTraversalDetected``) are raised
as-is. Nothing is retried.
"""
import asyncio
import inspect
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, TypeVar

from filestorage.listing import DirectoryListing
from filestorage.logging_config import setup_logging
from filestorage.schemas.config import ConfigurationOptions
from filestorage.schemas.options import (
    ChecksumOptions,
    CopyFileOptions,
    CreateDirectoryOptions,
    ListOptions,
    MimeTypeOptions,
    MiscellaneousOptions,
    MoveFileOptions,
    OptionsInput,
    PublicUrlOptions,
    TemporaryUrlOptions,
    UploadRequestOptions,
    WriteOptions,
    merge_options,
)
from filestorage.schemas.stat import FileInfo, StatEntry
from filestorage.schemas.uploads import UploadRequest
from filestorage.storage import exceptions as errors
from filestorage.storage.base import StorageAdapter
from filestorage.utils.abort import AbortSignal, maybe_abort
from filestorage.utils.paths import PathNormalizer
from filestorage.utils.streams import (
    FileContents,
    checksum_from_stream,
    close_stream,
    read_to_bytes,
    read_to_string,
    to_byte_stream,
)

logger = setup_logging()

T = TypeVar("T")
OptionsT = TypeVar("OptionsT", bound=MiscellaneousOptions)


class FileStorage:
    """
    Backend-agnostic file storage.

    Args:
        adapter: Backend implementation of the StorageAdapter contract
        path_normalizer: Normalizer applied to every path argument
        options: ConfigurationOptions (or a mapping of its fields)

    Examples:
        >>> storage = FileStorage(InMemoryStorageAdapter())
        >>> await storage.write("reports/2024.csv", "a,b\\n1,2\\n")
        >>> [entry.path async for entry in storage.list("reports")]
        ['reports/2024.csv']
    """

    def __init__(
        self,
        adapter: StorageAdapter,
        path_normalizer: PathNormalizer | None = None,
        options: ConfigurationOptions | Mapping[str, Any] | None = None,
    ):
        self.adapter = adapter
        self.path_normalizer = path_normalizer or PathNormalizer()
        if isinstance(options, ConfigurationOptions):
            self.options = options
        else:
            self.options = ConfigurationOptions(**(options or {}))

    # Writing

    async def write(self, path: str, contents: FileContents, options: OptionsInput = None) -> None:
        """
        Write a file.

        Args:
            path: Destination path
            contents: str, bytes-like, (async) iterable of bytes or binary file object
            options: WriteOptions (visibility, mime_type, cache_control, ...)

        The caller's stream is closed once the write completes or fails.
        """
        stream = to_byte_stream(contents)

        try:
            await self._perform(
                errors.UnableToWriteFile,
                {"path": path, "options": options},
                lambda: self._merge(WriteOptions, self.options.defaults, self.options.writes, options),
                lambda merged: self.adapter.write(self._normalize(path), stream, merged),
            )
        finally:
            await close_stream(stream)
            await close_stream(contents)

    async def create_directory(self, path: str, options: OptionsInput = None) -> None:
        await self._perform(
            errors.UnableToCreateDirectory,
            {"path": path, "options": options},
            lambda: self._merge(CreateDirectoryOptions, self.options.defaults, options),
            lambda merged: self.adapter.create_directory(self._normalize(path), merged),
        )

    async def copy_file(self, from_path: str, to_path: str, options: OptionsInput = None) -> None:
        await self._perform(
            errors.UnableToCopyFile,
            {"from": from_path, "to": to_path, "options": options},
            lambda: self._merge(CopyFileOptions, self.options.defaults, self.options.copies, options),
            lambda merged: self.adapter.copy_file(self._normalize(from_path), self._normalize(to_path), merged),
        )

    async def move_file(self, from_path: str, to_path: str, options: OptionsInput = None) -> None:
        await self._perform(
            errors.UnableToMoveFile,
            {"from": from_path, "to": to_path, "options": options},
            lambda: self._merge(MoveFileOptions, self.options.defaults, self.options.moves, options),
            lambda merged: self.adapter.move_file(self._normalize(from_path), self._normalize(to_path), merged),
        )

    # Reading

    async def read(self, path: str, options: OptionsInput = None) -> AsyncIterator[bytes]:
        """
        Open a file for reading.

        Returns:
            Async iterator yielding file chunks. A not-found condition that
            only surfaces while streaming is raised as ``FileWasNotFound``,
            any other streaming failure as ``UnableToReadFile``.
        """
        context = {"path": path, "options": options}
        merged_options: list[MiscellaneousOptions] = []

        async def operation(merged: MiscellaneousOptions) -> AsyncIterator[bytes]:
            merged_options.append(merged)
            return await self._open(self._normalize(path), merged)

        stream = await self._perform(
            errors.UnableToReadFile,
            context,
            lambda: self._merge(MiscellaneousOptions, options),
            operation,
        )

        return self._guard_read_stream(stream, path, context, merged_options[0].abort_signal)

    async def read_to_string(self, path: str, options: OptionsInput = None, encoding: str = "utf-8") -> str:
        return await read_to_string(await self.read(path, options), encoding)

    async def read_to_bytes(self, path: str, options: OptionsInput = None) -> bytes:
        return await read_to_bytes(await self.read(path, options))

    # Deleting

    async def delete_file(self, path: str, options: OptionsInput = None) -> None:
        await self._perform(
            errors.UnableToDeleteFile,
            {"path": path, "options": options},
            lambda: self._merge(MiscellaneousOptions, options),
            lambda merged: self.adapter.delete_file(self._normalize(path), merged),
        )

    async def delete_directory(self, path: str, options: OptionsInput = None) -> None:
        await self._perform(
            errors.UnableToDeleteDirectory,
            {"path": path, "options": options},
            lambda: self._merge(MiscellaneousOptions, options),
            lambda merged: self.adapter.delete_directory(self._normalize(path), merged),
        )

    # Metadata

    async def stat(self, path: str, options: OptionsInput = None) -> StatEntry:
        return await self._perform(
            errors.UnableToGetStat,
            {"path": path, "options": options},
            lambda: self._merge(MiscellaneousOptions, options),
            lambda merged: self.adapter.stat(self._normalize(path), merged),
        )

    async def stat_file(self, path: str, options: OptionsInput = None) -> FileInfo:
        """Stat a path and insist on it being a file."""
        stat = await self.stat(path, options)

        if stat.is_file:
            return stat

        raise errors.UnableToGetStat.no_file_stat_resolved(context={"path": path, "options": options})

    async def file_exists(self, path: str, options: OptionsInput = None) -> bool:
        return await self._perform(
            errors.UnableToCheckFileExistence,
            {"path": path, "options": options},
            lambda: self._merge(MiscellaneousOptions, options),
            lambda merged: self.adapter.file_exists(self._normalize(path), merged),
        )

    async def directory_exists(self, path: str, options: OptionsInput = None) -> bool:
        return await self._perform(
            errors.UnableToCheckDirectoryExistence,
            {"path": path, "options": options},
            lambda: self._merge(MiscellaneousOptions, options),
            lambda merged: self.adapter.directory_exists(self._normalize(path), merged),
        )

    async def mime_type(self, path: str, options: OptionsInput = None) -> str:
        return await self._perform(
            errors.UnableToGetMimeType,
            {"path": path, "options": options},
            lambda: self._merge(MimeTypeOptions, self.options.mime_types, options),
            lambda merged: self.adapter.mime_type(self._normalize(path), merged),
        )

    async def last_modified(self, path: str, options: OptionsInput = None) -> int:
        return await self._perform(
            errors.UnableToGetLastModified,
            {"path": path, "options": options},
            lambda: self._merge(MiscellaneousOptions, options),
            lambda merged: self.adapter.last_modified(self._normalize(path), merged),
        )

    async def file_size(self, path: str, options: OptionsInput = None) -> int:
        return await self._perform(
            errors.UnableToGetFileSize,
            {"path": path, "options": options},
            lambda: self._merge(MiscellaneousOptions, options),
            lambda merged: self.adapter.file_size(self._normalize(path), merged),
        )

    async def checksum(self, path: str, options: OptionsInput = None) -> str:
        """
        Get a checksum of the file contents.

        When the adapter reports the algorithm as unavailable the checksum is
        computed here by streaming the whole file through ``hashlib``.
        Defaults: md5, hex encoded.
        """

        async def operation(merged: ChecksumOptions) -> str:
            normalized = self._normalize(path)
            try:
                return await self.adapter.checksum(normalized, merged)
            except errors.ChecksumIsNotAvailable as e:
                logger.debug(f"Checksum {e.algo} not available for {normalized}, computing from contents")
                stream = await self._open(normalized, merged)
                try:
                    return await checksum_from_stream(stream, merged.algo, merged.encoding)
                finally:
                    await close_stream(stream)

        return await self._perform(
            errors.UnableToGetChecksum,
            {"path": path, "options": options},
            lambda: self._merge(ChecksumOptions, self.options.checksums, options),
            operation,
        )

    # Listing

    def list(self, path: str, options: OptionsInput = None) -> DirectoryListing:
        """
        List the contents of a directory.

        Args:
            path: Directory path ("" or "/" for the root)
            options: ListOptions; ``deep`` defaults to False

        Returns:
            A lazy, single-pass DirectoryListing
        """
        context = {"path": path, "options": options}
        merged = None

        try:
            merged = self._merge(ListOptions, self.options.list, options)
            maybe_abort(merged.abort_signal)
        except Exception as e:
            signal = merged.abort_signal if merged is not None else None
            raise self._wrap(errors.UnableToListDirectory, e, context, signal) from e

        deep = bool(merged.deep)
        normalized = self._normalize(path)

        try:
            listing = self.adapter.list(normalized, merged)
        except Exception as e:
            raise self._wrap(errors.UnableToListDirectory, e, context, merged.abort_signal) from e

        return DirectoryListing(listing, path, deep, merged.abort_signal)

    # Visibility

    async def change_visibility(self, path: str, visibility: str, options: OptionsInput = None) -> None:
        handling = self.options.visibility_handling

        async def operation(merged: MiscellaneousOptions) -> None:
            normalized = self._normalize(path)
            if handling is None:
                return await self.adapter.change_visibility(normalized, visibility, merged)
            if handling.strategy == "error":
                raise errors.UnableToSetVisibility.because(
                    handling.error_message,
                    context={"path": path, "visibility": visibility, "options": options},
                )

        await self._perform(
            errors.UnableToSetVisibility,
            {"path": path, "visibility": visibility, "options": options},
            lambda: self._merge(MiscellaneousOptions, self.options.visibility, options),
            operation,
        )

    set_visibility = change_visibility

    async def visibility(self, path: str, options: OptionsInput = None) -> str:
        handling = self.options.visibility_handling

        async def operation(merged: MiscellaneousOptions) -> str:
            normalized = self._normalize(path)
            if handling is None:
                return await self.adapter.visibility(normalized, merged)
            if handling.strategy == "error":
                raise errors.UnableToGetVisibility.because(
                    handling.error_message,
                    context={"path": path, "options": options},
                )
            return handling.staged_result

        return await self._perform(
            errors.UnableToGetVisibility,
            {"path": path, "options": options},
            lambda: self._merge(MiscellaneousOptions, self.options.visibility, options),
            operation,
        )

    # URLs and uploads

    async def public_url(self, path: str, options: OptionsInput = None) -> str:
        return await self._perform(
            errors.UnableToGetPublicUrl,
            {"path": path, "options": options},
            lambda: self._merge(PublicUrlOptions, self.options.public_urls, options),
            lambda merged: self.adapter.public_url(self._normalize(path), merged),
        )

    async def temporary_url(self, path: str, options: OptionsInput) -> str:
        """Generate a URL valid until ``options.expires_at`` (required)."""
        return await self._perform(
            errors.UnableToGetTemporaryUrl,
            {"path": path, "options": options},
            lambda: self._merge(TemporaryUrlOptions, self.options.temporary_urls, options),
            lambda merged: self.adapter.temporary_url(self._normalize(path), merged),
        )

    async def prepare_upload(self, path: str, options: OptionsInput) -> UploadRequest:
        """
        Prepare a client-direct upload.

        Uses the configured ``prepared_upload_strategy`` first, then the
        adapter's ``prepare_upload`` capability.

        Raises:
            UploadPreparationNotSupported: When neither is available
            UnableToPrepareUploadRequest: When preparing fails
        """
        context = {"path": path, "options": options}

        async def operation(merged: UploadRequestOptions) -> UploadRequest:
            normalized = self._normalize(path)
            strategy = self.options.prepared_upload_strategy
            if strategy is not None:
                return await strategy.prepare_upload(normalized, merged)

            prepare_upload = getattr(self.adapter, "prepare_upload", None)
            if prepare_upload is None:
                raise errors.UploadPreparationNotSupported.for_adapter(self.adapter, context=context)

            return await prepare_upload(normalized, merged)

        return await self._perform(
            errors.UnableToPrepareUploadRequest,
            context,
            lambda: self._merge(UploadRequestOptions, options),
            operation,
        )

    # Internals

    def _normalize(self, path: str) -> str:
        return self.path_normalizer.normalize_path(path)

    def _merge(self, options_class: type[OptionsT], *layers: OptionsInput) -> OptionsT:
        merged = merge_options(options_class, {"timeout": self.options.timeout}, *layers)
        signal = self._signal_for(merged)

        if signal is not merged.abort_signal:
            merged = merged.model_copy(update={"abort_signal": signal})

        return merged

    @staticmethod
    def _signal_for(options: MiscellaneousOptions) -> AbortSignal | None:
        if options.timeout is None:
            return options.abort_signal

        deadline = AbortSignal.timeout(options.timeout)

        if options.abort_signal is None:
            return deadline

        return AbortSignal.any([options.abort_signal, deadline])

    async def _open(self, path: str, options: MiscellaneousOptions) -> AsyncIterator[bytes]:
        stream = self.adapter.read(path, options)
        if inspect.isawaitable(stream):
            stream = await stream
        return stream

    async def _perform(
        self,
        error_class: type[errors.FileStorageError],
        context: dict[str, Any],
        build_options: Callable[[], OptionsT],
        operation: Callable[[OptionsT], Awaitable[T]],
    ) -> T:
        signal = None

        try:
            options = build_options()
            signal = options.abort_signal
            maybe_abort(signal)
            return await self._race(operation(options), signal)
        except errors.PathError:
            raise
        except error_class as e:
            e.was_aborted = e.was_aborted or (signal is not None and signal.aborted)
            raise
        except Exception as e:
            raise self._wrap(error_class, e, context, signal) from e

    @staticmethod
    async def _race(awaitable: Awaitable[T], signal: AbortSignal | None) -> T:
        """Await ``awaitable``, cancelling it when ``signal`` fires first."""
        if signal is None:
            return await awaitable

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(signal.wait())

        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if not task.done():
            task.cancel()
            # wait for the adapter to clean up; its outcome is superseded by the abort
            await asyncio.gather(task, return_exceptions=True)
            raise signal.reason

        return task.result()

    @staticmethod
    def _wrap(
        error_class: type[errors.FileStorageError],
        error: Exception,
        context: dict[str, Any],
        signal: AbortSignal | None,
    ) -> errors.FileStorageError:
        wrapped = error_class.because(errors.error_to_message(error), context=context, cause=error)
        wrapped.was_aborted = signal is not None and signal.aborted
        logger.debug(f"{error_class.__name__}: {error.__class__.__name__}: {error}")
        return wrapped

    async def _guard_read_stream(
        self,
        stream: AsyncIterator[bytes],
        path: str,
        context: dict[str, Any],
        signal: AbortSignal | None,
    ) -> AsyncIterator[bytes]:
        try:
            async for chunk in stream:
                yield chunk
                maybe_abort(signal)
        except (errors.FileWasNotFound, errors.UnableToReadFile):
            raise
        except FileNotFoundError as e:
            raise errors.FileWasNotFound.at_location(path, context=context, cause=e) from e
        except Exception as e:
            raise self._wrap(errors.UnableToReadFile, e, context, signal) from e
        finally:
            await close_stream(stream)
