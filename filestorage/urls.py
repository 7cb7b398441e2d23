"""
URL generators for adapters that cannot sign URLs themselves.

The local adapter delegates ``public_url`` and ``temporary_url`` to these
strategies, so applications can plug in their own routing or signing.
"""
from typing import Protocol, runtime_checkable

from filestorage.schemas.options import PublicUrlOptions, TemporaryUrlOptions
from filestorage.storage.exceptions import UnableToGetTemporaryUrl


@runtime_checkable
class PublicUrlGenerator(Protocol):
    async def public_url(self, path: str, options: PublicUrlOptions) -> str:
        """Build a public URL for ``path``."""
        ...


@runtime_checkable
class TemporaryUrlGenerator(Protocol):
    async def temporary_url(self, path: str, options: TemporaryUrlOptions) -> str:
        """Build a URL for ``path`` that stops working at ``options.expires_at``."""
        ...


class BaseUrlPublicUrlGenerator:
    """
    Join the path onto a base URL.

    A ``base_url`` passed with the call takes precedence over the one given
    here.
    """

    def __init__(self, base_url: str | None = None):
        self.base_url = base_url

    async def public_url(self, path: str, options: PublicUrlOptions) -> str:
        base_url = (options.model_extra or {}).get("base_url") or self.base_url

        if base_url is None:
            raise ValueError("No base URL defined for public URL generation")

        return f"{base_url.rstrip('/')}/{path}"


class TemporaryUrlsAreNotSupported:
    """Generator for backends without a way to sign URLs."""

    async def temporary_url(self, path: str, options: TemporaryUrlOptions) -> str:
        raise UnableToGetTemporaryUrl("No temporary URL generator provided", {"path": path})
