"""
Unit tests for InMemoryStorageAdapter, exercised through FileStorage.
"""
import pytest

from filestorage.schemas.options import ChecksumOptions, MiscellaneousOptions
from filestorage.storage.exceptions import ChecksumIsNotAvailable, FileWasNotFound
from filestorage.visibility import Visibility


@pytest.mark.asyncio
async def test_shallow_and_deep_listing_are_consistent(storage):
    await storage.write("file_1.txt", "contents")
    await storage.write("file_2.txt", "contents")
    await storage.create_directory("directory_1")
    await storage.create_directory("directory_2")

    shallow = await storage.list("/", {"deep": False}).to_array()
    deep = await storage.list("/", {"deep": True}).to_array()

    assert len(shallow) == 4
    assert shallow == deep


@pytest.mark.asyncio
async def test_listing_entries_in_a_directory_shallow(storage):
    await storage.write("outside/path.txt", "test")
    await storage.write("inside/a.txt", "test")
    await storage.write("inside/b.txt", "test")
    await storage.write("inside/c/a.txt", "test")

    listing = await storage.list("inside").to_array()

    assert [entry.type for entry in listing] == ["file", "file", "directory"]
    assert [entry.path for entry in listing] == ["inside/a.txt", "inside/b.txt", "inside/c"]


@pytest.mark.asyncio
async def test_listing_entries_in_a_directory_deep(storage):
    await storage.write("outside/path.txt", "test")
    await storage.write("inside/a.txt", "test")
    await storage.write("inside/b.txt", "test")
    await storage.write("inside/c/a.txt", "test")

    listing = await storage.list("inside", {"deep": True}).to_array()

    assert [entry.type for entry in listing] == ["file", "file", "directory", "file"]
    assert [entry.path for entry in listing] == [
        "inside/a.txt",
        "inside/b.txt",
        "inside/c",
        "inside/c/a.txt",
    ]


@pytest.mark.asyncio
async def test_listing_a_missing_directory_is_empty(storage):
    assert await storage.list("missing", {"deep": True}).to_array() == []


@pytest.mark.asyncio
async def test_parent_directories_get_directory_visibility(storage):
    await storage.write("a/b/file.txt", "contents", {"directory_visibility": Visibility.PRIVATE})

    assert await storage.visibility("a") == Visibility.PRIVATE
    assert await storage.visibility("a/b") == Visibility.PRIVATE


@pytest.mark.asyncio
async def test_copy_retains_visibility_when_asked(storage):
    await storage.write("source.txt", "contents", {"visibility": Visibility.PRIVATE})

    await storage.copy_file("source.txt", "retained.txt", {"retain_visibility": True})
    await storage.copy_file("source.txt", "default.txt")
    await storage.copy_file("source.txt", "explicit.txt", {"retain_visibility": True, "visibility": "public"})

    assert await storage.visibility("retained.txt") == Visibility.PRIVATE
    assert await storage.visibility("default.txt") == Visibility.PUBLIC
    assert await storage.visibility("explicit.txt") == Visibility.PUBLIC


@pytest.mark.asyncio
async def test_delete_everything(storage, adapter):
    await storage.write("a/b.txt", "contents")

    adapter.delete_everything()

    assert not await storage.file_exists("a/b.txt")
    assert not await storage.directory_exists("a")


@pytest.mark.asyncio
async def test_checksums_are_reported_as_unavailable(storage, adapter):
    await storage.write("file.txt", "contents")

    with pytest.raises(ChecksumIsNotAvailable) as exc:
        await adapter.checksum("file.txt", ChecksumOptions(algo="crc32c"))

    assert exc.value.algo == "crc32c"


@pytest.mark.asyncio
async def test_reading_a_missing_file_fails_immediately(adapter):
    with pytest.raises(FileWasNotFound):
        await adapter.read("404.txt", MiscellaneousOptions())
