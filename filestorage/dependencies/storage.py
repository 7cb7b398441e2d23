"""
Storage construction from settings.

This module builds a FileStorage for the backend selected with the
STORAGE_BACKEND environment variable.
"""
from filestorage.config import Settings, settings as default_settings
from filestorage.file_storage import FileStorage
from filestorage.schemas.config import ConfigurationOptions
from filestorage.storage.base import StorageAdapter
from filestorage.storage.local import LocalStorageAdapter
from filestorage.storage.memory import InMemoryStorageAdapter


def get_adapter(settings: Settings | None = None) -> StorageAdapter:
    """
    Return storage adapter based on configuration.

    Raises:
        ValueError: If STORAGE_BACKEND is not supported
    """
    settings = settings or default_settings

    if settings.STORAGE_BACKEND == "local":
        return LocalStorageAdapter(
            settings.STORAGE_ROOT_PATH,
            public_base_url=settings.STORAGE_PUBLIC_BASE_URL,
        )

    if settings.STORAGE_BACKEND == "memory":
        return InMemoryStorageAdapter()

    raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}")


def get_storage(settings: Settings | None = None) -> FileStorage:
    """
    Return a FileStorage for the configured backend.

    This allows switching between local and in-memory storage
    by changing the STORAGE_BACKEND environment variable.

    Args:
        settings: Settings to use instead of the environment-loaded ones

    Returns:
        FileStorage instance

    Raises:
        ValueError: If STORAGE_BACKEND is not supported
    """
    settings = settings or default_settings

    return FileStorage(
        get_adapter(settings),
        options=ConfigurationOptions(
            defaults={
                "visibility": settings.STORAGE_DEFAULT_VISIBILITY,
                "directory_visibility": settings.STORAGE_DIRECTORY_VISIBILITY,
            },
            timeout=settings.STORAGE_TIMEOUT_MS,
        ),
    )
