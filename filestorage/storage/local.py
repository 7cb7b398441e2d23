"""
Local filesystem storage implementation.

This module provides a local filesystem implementation of the storage adapter
with async file operations. Canonical paths map onto a root directory through
a PathPrefixer; visibility maps onto unix permission bits.
"""
import asyncio
import os
import shutil
import stat as stat_module
from pathlib import Path
from typing import AsyncIterator
from uuid import uuid4

import aiofiles
import aiofiles.os

from filestorage.schemas.options import (
    ChecksumOptions,
    CopyFileOptions,
    CreateDirectoryOptions,
    ListOptions,
    MiscellaneousOptions,
    MoveFileOptions,
    PublicUrlOptions,
    TemporaryUrlOptions,
    UploadRequestOptions,
    VisibilityOptions,
    WriteOptions,
)
from filestorage.schemas.stat import DirectoryInfo, FileInfo, StatEntry
from filestorage.schemas.uploads import UploadRequest
from filestorage.storage.base import StorageAdapter
from filestorage.storage.exceptions import ChecksumIsNotAvailable, FileWasNotFound
from filestorage.uploads import PreparedUploadsAreNotSupported, PreparedUploadStrategy
from filestorage.urls import (
    BaseUrlPublicUrlGenerator,
    PublicUrlGenerator,
    TemporaryUrlGenerator,
    TemporaryUrlsAreNotSupported,
)
from filestorage.utils.abort import maybe_abort
from filestorage.utils.prefixer import PathPrefixer
from filestorage.utils.streams import CHUNK_SIZE
from filestorage.visibility import UnixVisibilityConversion


def _scan_directory(directory: str) -> list[tuple[str, os.stat_result]]:
    # temporary files of in-flight writes are skipped
    with os.scandir(directory) as entries:
        return [
            (entry.path, entry.stat(follow_symlinks=False))
            for entry in entries
            if not (entry.name.startswith(".") and entry.name.endswith(".tmp"))
        ]


class LocalStorageAdapter(StorageAdapter):
    """
    Local filesystem storage with async operations.

    Files are written to a temporary sibling first and moved into place once
    every chunk is on disk, so a cancelled or failed write never leaves a
    partial file at the target path.
    """

    def __init__(
        self,
        root_path: str | Path,
        *,
        root_directory_visibility: str | None = None,
        public_base_url: str | None = None,
        visibility_conversion: UnixVisibilityConversion | None = None,
        upload_strategy: PreparedUploadStrategy | None = None,
        public_url_generator: PublicUrlGenerator | None = None,
        temporary_url_generator: TemporaryUrlGenerator | None = None,
    ):
        """
        Initialize local storage adapter.

        Args:
            root_path: Directory all canonical paths are resolved against
            root_directory_visibility: Visibility of the root directory when
                it has to be created (default from the visibility conversion)
            public_base_url: Base URL for public_url(); without it public URLs
                are not available
            visibility_conversion: Mapping between visibility and permissions
            upload_strategy: Strategy used for prepare_upload()
            public_url_generator: Strategy used for public_url() (default joins
                the path onto public_base_url)
            temporary_url_generator: Strategy used for temporary_url() (default
                fails)
        """
        self.root_path = Path(root_path)
        self.prefixer = PathPrefixer(os.path.join(str(self.root_path), ""), os.sep, os.path.join)
        self.visibility_conversion = visibility_conversion or UnixVisibilityConversion()
        self.root_directory_visibility = (
            root_directory_visibility or self.visibility_conversion.default_directory_visibility
        )
        self.public_base_url = public_base_url
        self.upload_strategy = upload_strategy or PreparedUploadsAreNotSupported()
        self.public_url_generator = public_url_generator or BaseUrlPublicUrlGenerator(public_base_url)
        self.temporary_url_generator = temporary_url_generator or TemporaryUrlsAreNotSupported()
        self._root_created = False

    async def write(self, path: str, contents: AsyncIterator[bytes], options: WriteOptions) -> None:
        """
        Stream file to disk in chunks (async).

        Args:
            path: Canonical file path
            contents: Async iterator yielding file chunks
            options: Merged write options
        """
        maybe_abort(options.abort_signal)
        await self._ensure_root_directory_exists()
        await self._ensure_parent_directory_exists(path, options)
        maybe_abort(options.abort_signal)

        location = self.prefixer.prefix_file_path(path)
        temp_location = os.path.join(os.path.dirname(location), f".{uuid4().hex}.tmp")

        try:
            async with aiofiles.open(temp_location, "wb") as f:
                async for chunk in contents:
                    maybe_abort(options.abort_signal)
                    await f.write(chunk)

            maybe_abort(options.abort_signal)

            if options.visibility:
                await asyncio.to_thread(
                    os.chmod,
                    temp_location,
                    self.visibility_conversion.visibility_to_file_permissions(options.visibility),
                )

            # Atomic move (rename)
            await aiofiles.os.replace(temp_location, location)

        except (Exception, asyncio.CancelledError):
            # Clean up partial file on error
            if os.path.exists(temp_location):
                os.remove(temp_location)
            raise

    async def read(self, path: str, options: MiscellaneousOptions) -> AsyncIterator[bytes]:
        location = self.prefixer.prefix_file_path(path)

        if not await aiofiles.os.path.isfile(location):
            raise FileWasNotFound.at_location(path)

        return self._stream(location, options)

    async def _stream(self, location: str, options: MiscellaneousOptions) -> AsyncIterator[bytes]:
        async with aiofiles.open(location, "rb") as f:
            while True:
                maybe_abort(options.abort_signal)
                chunk = await f.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

    async def delete_file(self, path: str, options: MiscellaneousOptions) -> None:
        maybe_abort(options.abort_signal)

        try:
            await aiofiles.os.remove(self.prefixer.prefix_file_path(path))
        except FileNotFoundError:
            pass

    async def create_directory(self, path: str, options: CreateDirectoryOptions) -> None:
        maybe_abort(options.abort_signal)
        location = self.prefixer.prefix_directory_path(path)

        await aiofiles.os.makedirs(location, exist_ok=True)

        if options.directory_visibility:
            await asyncio.to_thread(
                os.chmod,
                location,
                self.visibility_conversion.visibility_to_directory_permissions(options.directory_visibility),
            )

    async def delete_directory(self, path: str, options: MiscellaneousOptions) -> None:
        maybe_abort(options.abort_signal)

        try:
            await asyncio.to_thread(shutil.rmtree, self.prefixer.prefix_directory_path(path))
        except FileNotFoundError:
            pass

        if path == "":
            self._root_created = False

    async def copy_file(self, from_path: str, to_path: str, options: CopyFileOptions) -> None:
        maybe_abort(options.abort_signal)
        await self._ensure_root_directory_exists()
        await self._ensure_parent_directory_exists(to_path, options)
        maybe_abort(options.abort_signal)

        source = self.prefixer.prefix_file_path(from_path)
        destination = self.prefixer.prefix_file_path(to_path)

        await asyncio.to_thread(shutil.copyfile, source, destination)

        if options.visibility:
            await self._chmod_file(destination, options.visibility)
        elif options.retain_visibility:
            await asyncio.to_thread(shutil.copymode, source, destination)

    async def move_file(self, from_path: str, to_path: str, options: MoveFileOptions) -> None:
        maybe_abort(options.abort_signal)
        await self._ensure_root_directory_exists()
        await self._ensure_parent_directory_exists(to_path, options)
        maybe_abort(options.abort_signal)

        destination = self.prefixer.prefix_file_path(to_path)
        await aiofiles.os.replace(self.prefixer.prefix_file_path(from_path), destination)

        if options.visibility:
            await self._chmod_file(destination, options.visibility)

    async def stat(self, path: str, options: MiscellaneousOptions) -> StatEntry:
        maybe_abort(options.abort_signal)
        info = await aiofiles.os.stat(self.prefixer.prefix_file_path(path))

        return self._to_stat_entry(info, path)

    async def list(self, path: str, options: ListOptions) -> AsyncIterator[StatEntry]:
        pending = [self.prefixer.prefix_directory_path(path)]

        while pending:
            maybe_abort(options.abort_signal)
            directory = pending.pop(0)

            try:
                items = await asyncio.to_thread(_scan_directory, directory)
            except FileNotFoundError:
                # missing directories list as empty
                continue

            for location, info in items:
                maybe_abort(options.abort_signal)

                if stat_module.S_ISDIR(info.st_mode):
                    if options.deep:
                        pending.append(location)
                    yield self._to_stat_entry(info, self.prefixer.strip_directory_path(location))
                elif stat_module.S_ISREG(info.st_mode):
                    yield self._to_stat_entry(info, self.prefixer.strip_file_path(location))

    async def change_visibility(self, path: str, visibility: str, options: MiscellaneousOptions) -> None:
        maybe_abort(options.abort_signal)
        location = self.prefixer.prefix_file_path(path)

        if await aiofiles.os.path.isdir(location):
            permissions = self.visibility_conversion.visibility_to_directory_permissions(visibility)
            await asyncio.to_thread(os.chmod, location, permissions)
            return

        await self._chmod_file(location, visibility)

    async def visibility(self, path: str, options: MiscellaneousOptions) -> str:
        stat = await self.stat(path, options)

        if not stat.visibility:
            raise ValueError("Unable to determine visibility")

        return stat.visibility

    async def file_exists(self, path: str, options: MiscellaneousOptions) -> bool:
        maybe_abort(options.abort_signal)
        return await aiofiles.os.path.isfile(self.prefixer.prefix_file_path(path))

    async def directory_exists(self, path: str, options: MiscellaneousOptions) -> bool:
        maybe_abort(options.abort_signal)
        return await aiofiles.os.path.isdir(self.prefixer.prefix_directory_path(path))

    async def public_url(self, path: str, options: PublicUrlOptions) -> str:
        maybe_abort(options.abort_signal)
        return await self.public_url_generator.public_url(path, options)

    async def temporary_url(self, path: str, options: TemporaryUrlOptions) -> str:
        maybe_abort(options.abort_signal)
        return await self.temporary_url_generator.temporary_url(path, options)

    async def checksum(self, path: str, options: ChecksumOptions) -> str:
        raise ChecksumIsNotAvailable.checksum_not_supported(
            options.algo or "unknown",
            context={"path": path},
        )

    async def prepare_upload(self, path: str, options: UploadRequestOptions) -> UploadRequest:
        maybe_abort(options.abort_signal)
        return await self.upload_strategy.prepare_upload(path, options)

    async def _chmod_file(self, location: str, visibility: str) -> None:
        permissions = self.visibility_conversion.visibility_to_file_permissions(visibility)
        await asyncio.to_thread(os.chmod, location, permissions)

    async def _ensure_root_directory_exists(self) -> None:
        if self._root_created:
            return

        await self.create_directory("", CreateDirectoryOptions(directory_visibility=self.root_directory_visibility))
        self._root_created = True

    async def _ensure_parent_directory_exists(self, path: str, options: VisibilityOptions) -> None:
        directory = os.path.dirname(path)

        if directory:
            await self.create_directory(
                directory,
                CreateDirectoryOptions(directory_visibility=options.directory_visibility),
            )

    def _to_stat_entry(self, info: os.stat_result, path: str) -> StatEntry:
        permissions = info.st_mode & 0o777
        last_modified_ms = int(info.st_mtime * 1000)

        if stat_module.S_ISREG(info.st_mode):
            return FileInfo(
                path=path,
                last_modified_ms=last_modified_ms,
                visibility=self.visibility_conversion.file_permissions_to_visibility(permissions),
                size=info.st_size,
            )

        if stat_module.S_ISDIR(info.st_mode):
            return DirectoryInfo(
                path=path,
                last_modified_ms=last_modified_ms,
                visibility=self.visibility_conversion.directory_permissions_to_visibility(permissions),
            )

        raise ValueError(f"Unsupported file entry encountered at {path}")
