"""
Unit tests for LocalStorageAdapter.

Uses a temporary root directory per test.
"""
import os

import pytest

from filestorage.file_storage import FileStorage
from filestorage.storage import exceptions as errors
from filestorage.storage.local import LocalStorageAdapter
from filestorage.utils.datetime import normalize_expiry_to_milliseconds
from filestorage.visibility import Visibility


@pytest.mark.asyncio
async def test_write_and_read(local_storage, tmp_path):
    """Test a written file lands under the root directory."""
    await local_storage.write("reports/2024.csv", "a,b\n1,2\n")

    assert (tmp_path / "root" / "reports" / "2024.csv").read_text() == "a,b\n1,2\n"
    assert await local_storage.read_to_string("reports/2024.csv") == "a,b\n1,2\n"


@pytest.mark.asyncio
async def test_no_temporary_files_remain_after_write(local_storage, tmp_path):
    await local_storage.write("file.txt", b"x" * 200_000)

    assert os.listdir(tmp_path / "root") == ["file.txt"]


@pytest.mark.asyncio
async def test_failed_write_leaves_no_partial_file(local_storage, tmp_path):
    """Test a failing source stream removes the partial file."""

    async def contents():
        yield b"partial"
        raise ConnectionError("client disconnected")

    with pytest.raises(errors.UnableToWriteFile) as exc:
        await local_storage.write("upload.bin", contents())

    assert isinstance(exc.value.cause, ConnectionError)
    assert os.listdir(tmp_path / "root") == []


@pytest.mark.asyncio
async def test_reading_a_missing_file(local_storage):
    with pytest.raises(errors.UnableToReadFile) as exc:
        await local_storage.read_to_bytes("404.txt")

    assert exc.value.was_file_not_found is True


@pytest.mark.asyncio
async def test_visibility_round_trip(local_storage, tmp_path):
    await local_storage.write("file.txt", "contents", {"visibility": Visibility.PRIVATE})

    assert await local_storage.visibility("file.txt") == Visibility.PRIVATE
    assert (tmp_path / "root" / "file.txt").stat().st_mode & 0o777 == 0o600

    await local_storage.change_visibility("file.txt", Visibility.PUBLIC)

    assert await local_storage.visibility("file.txt") == Visibility.PUBLIC
    assert (tmp_path / "root" / "file.txt").stat().st_mode & 0o777 == 0o644


@pytest.mark.asyncio
async def test_directory_visibility(local_storage, tmp_path):
    await local_storage.create_directory("private", {"directory_visibility": Visibility.PRIVATE})

    assert (tmp_path / "root" / "private").stat().st_mode & 0o777 == 0o700
    assert await local_storage.visibility("private") == Visibility.PRIVATE


@pytest.mark.asyncio
async def test_shallow_and_deep_listing(local_storage):
    await local_storage.write("a.txt", "contents")
    await local_storage.write("b.txt", "contents")
    await local_storage.write("c/a.txt", "contents")

    shallow = await local_storage.list("").to_array()
    deep = await local_storage.list("", {"deep": True}).to_array()

    assert [entry.path for entry in shallow] == ["a.txt", "b.txt", "c"]
    assert [entry.path for entry in deep] == ["a.txt", "b.txt", "c", "c/a.txt"]
    assert deep[3].is_file
    assert deep[3].size == 8


@pytest.mark.asyncio
async def test_listing_a_missing_directory_is_empty(local_storage):
    assert await local_storage.list("missing").to_array() == []


@pytest.mark.asyncio
async def test_copy_move_and_delete(local_storage):
    await local_storage.write("source.txt", "contents", {"visibility": Visibility.PRIVATE})

    await local_storage.copy_file("source.txt", "copies/retained.txt", {"retain_visibility": True})
    await local_storage.move_file("source.txt", "moved/source.txt")

    assert await local_storage.visibility("copies/retained.txt") == Visibility.PRIVATE
    assert await local_storage.read_to_string("moved/source.txt") == "contents"
    assert not await local_storage.file_exists("source.txt")

    await local_storage.delete_directory("copies")
    await local_storage.delete_file("moved/source.txt")
    await local_storage.delete_file("moved/source.txt")

    assert not await local_storage.directory_exists("copies")
    assert not await local_storage.file_exists("moved/source.txt")


@pytest.mark.asyncio
async def test_copying_a_missing_file_fails(local_storage):
    with pytest.raises(errors.UnableToCopyFile):
        await local_storage.copy_file("404.txt", "copy.txt")


@pytest.mark.asyncio
async def test_existence_checks(local_storage):
    await local_storage.write("dir/file.txt", "contents")

    assert await local_storage.file_exists("dir/file.txt") is True
    assert await local_storage.file_exists("dir") is False
    assert await local_storage.directory_exists("dir") is True
    assert await local_storage.directory_exists("dir/file.txt") is False


@pytest.mark.asyncio
async def test_checksum_and_metadata(local_storage):
    await local_storage.write("file.txt", "contents")

    assert await local_storage.checksum("file.txt") == "98bf7d8c15784f0a3d63204441e1e2aa"
    assert await local_storage.file_size("file.txt") == 8
    assert await local_storage.mime_type("file.txt") == "text/plain"
    assert await local_storage.last_modified("file.txt") > 0


@pytest.mark.asyncio
async def test_public_url(local_storage):
    url = await local_storage.public_url("some dir/file.txt")

    assert url == "https://cdn.example.com/files/some dir/file.txt"


@pytest.mark.asyncio
async def test_public_url_without_base_url(tmp_path):
    storage = FileStorage(LocalStorageAdapter(tmp_path))

    with pytest.raises(errors.UnableToGetPublicUrl):
        await storage.public_url("file.txt")


@pytest.mark.asyncio
async def test_temporary_urls_are_not_available(local_storage):
    with pytest.raises(errors.UnableToGetTemporaryUrl):
        await local_storage.temporary_url("file.txt", {"expires_at": 0})


@pytest.mark.asyncio
async def test_prepared_uploads_are_not_supported_by_default(local_storage):
    with pytest.raises(errors.UploadPreparationNotSupported):
        await local_storage.prepare_upload("file.txt", {"expires_at": 0})


@pytest.mark.asyncio
async def test_file_removed_after_read_surfaces_from_the_stream(local_storage, tmp_path):
    """Test a file deleted between read() and iteration raises FileWasNotFound."""
    await local_storage.write("f.txt", "contents")

    stream = await local_storage.read("f.txt")
    os.remove(tmp_path / "root" / "f.txt")

    with pytest.raises(errors.FileWasNotFound):
        async for _ in stream:
            pass


class SignedUrlGenerator:
    async def temporary_url(self, path, options):
        return f"https://files.example.com/{path}?expires={normalize_expiry_to_milliseconds(options.expires_at)}"


class RoutedUrlGenerator:
    async def public_url(self, path, options):
        return f"/media/{path}"


@pytest.mark.asyncio
async def test_custom_url_generators(tmp_path):
    """Test URL generation is delegated to the configured generators."""
    storage = FileStorage(
        LocalStorageAdapter(
            tmp_path,
            public_url_generator=RoutedUrlGenerator(),
            temporary_url_generator=SignedUrlGenerator(),
        )
    )

    assert await storage.public_url("a/b.txt") == "/media/a/b.txt"
    assert await storage.temporary_url("a/b.txt", {"expires_at": 1_700_000_000_000}) == (
        "https://files.example.com/a/b.txt?expires=1700000000000"
    )


@pytest.mark.asyncio
async def test_base_url_can_be_passed_per_call(tmp_path):
    storage = FileStorage(LocalStorageAdapter(tmp_path))

    url = await storage.public_url("file.txt", {"base_url": "https://static.example.com/"})

    assert url == "https://static.example.com/file.txt"
