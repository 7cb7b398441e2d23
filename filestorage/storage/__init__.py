"""
Storage adapters and the error taxonomy.

This package provides the adapter interface the FileStorage façade talks to,
allowing backends to be swapped without touching application code.
"""

from filestorage.storage.base import StorageAdapter
from filestorage.storage.local import LocalStorageAdapter
from filestorage.storage.memory import InMemoryStorageAdapter

__all__ = [
    "StorageAdapter",
    "LocalStorageAdapter",
    "InMemoryStorageAdapter",
]
