import pytest

import filestorage


def test_deprecated_adapter_names():
    with pytest.warns(DeprecationWarning, match="LocalStorageAdapter"):
        assert filestorage.LocalFileStorage is filestorage.LocalStorageAdapter

    with pytest.warns(DeprecationWarning, match="InMemoryStorageAdapter"):
        assert filestorage.InMemoryFileStorage is filestorage.InMemoryStorageAdapter


def test_unknown_attributes_still_fail():
    with pytest.raises(AttributeError):
        filestorage.DoesNotExist
