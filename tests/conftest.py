import pytest

from filestorage.file_storage import FileStorage
from filestorage.storage.local import LocalStorageAdapter
from filestorage.storage.memory import InMemoryStorageAdapter


@pytest.fixture
def adapter():
    """In-memory adapter with a fixed clock."""
    return InMemoryStorageAdapter(timestamp_resolver=lambda: 1_700_000_000_000)


@pytest.fixture
def storage(adapter):
    """FileStorage over the in-memory adapter."""
    return FileStorage(adapter)


@pytest.fixture
def local_adapter(tmp_path):
    """Local adapter rooted in a temporary directory."""
    return LocalStorageAdapter(tmp_path / "root", public_base_url="https://cdn.example.com/files")


@pytest.fixture
def local_storage(local_adapter):
    """FileStorage over the local adapter."""
    return FileStorage(local_adapter)
