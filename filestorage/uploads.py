"""
Prepared (client-direct) uploads.

A prepared upload strategy produces an ``UploadRequest`` that lets a client
send a file straight to the backend. The façade uses a configured strategy
first, then the adapter's optional ``prepare_upload`` capability.
"""
from typing import Protocol, runtime_checkable

from filestorage.schemas.options import UploadRequestOptions
from filestorage.schemas.uploads import UploadRequest
from filestorage.storage.exceptions import UploadPreparationNotSupported


@runtime_checkable
class PreparedUploadStrategy(Protocol):
    async def prepare_upload(self, path: str, options: UploadRequestOptions) -> UploadRequest:
        """Build an upload request for ``path``."""
        ...


class PreparedUploadsAreNotSupported:
    """Strategy for backends that cannot hand out direct upload requests."""

    async def prepare_upload(self, path: str, options: UploadRequestOptions) -> UploadRequest:
        raise UploadPreparationNotSupported("Prepared uploads are not supported", {"path": path})
