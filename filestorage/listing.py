"""
Lazy directory listings.

A ``DirectoryListing`` wraps the async iterator an adapter returns for a
single ``list()`` call. It is single-pass: once iterated (directly, through
``to_array()`` or through a filtered listing) it cannot be consumed again.
"""
import logging
from typing import AsyncIterator, Callable

from filestorage.schemas.stat import StatEntry
from filestorage.storage.exceptions import UnableToListDirectory, error_to_message
from filestorage.utils.abort import AbortSignal
from filestorage.utils.sorting import natural_sort_key

logger = logging.getLogger("filestorage.listing")

EntryFilter = Callable[[StatEntry], bool]


class DirectoryListing:
    """
    Single-pass async sequence of stat entries.

    Args:
        listing: Async iterator produced by the adapter
        path: Path that was listed (for error context)
        deep: Whether the listing is recursive (for error context)
        abort_signal: Signal checked before each entry is pulled
    """

    def __init__(
        self,
        listing: AsyncIterator[StatEntry],
        path: str,
        deep: bool,
        abort_signal: AbortSignal | None = None,
    ):
        self._listing = listing
        self.path = path
        self.deep = deep
        self._abort_signal = abort_signal
        self._consumed = False

    def _context(self) -> dict:
        return {"path": self.path, "deep": self.deep}

    def _claim(self) -> AsyncIterator[StatEntry]:
        if self._consumed:
            raise UnableToListDirectory.already_consumed(context=self._context())
        self._consumed = True
        return self._listing

    def filter(self, predicate: EntryFilter) -> "DirectoryListing":
        """Return a lazy listing restricted to entries matching ``predicate``."""
        source = self._claim()

        async def filtered() -> AsyncIterator[StatEntry]:
            async for entry in source:
                if predicate(entry):
                    yield entry

        return DirectoryListing(filtered(), self.path, self.deep, self._abort_signal)

    async def to_array(self, sorted: bool = True) -> list[StatEntry]:
        """
        Drain the listing.

        Args:
            sorted: Order entries by path in natural order (default True)
        """
        items = [entry async for entry in self]

        if sorted:
            items.sort(key=lambda entry: natural_sort_key(entry.path))

        return items

    async def __aiter__(self) -> AsyncIterator[StatEntry]:
        source = self._claim()
        iterator = source.__aiter__()

        try:
            while True:
                if self._abort_signal is not None:
                    self._abort_signal.throw_if_aborted()
                try:
                    entry = await iterator.__anext__()
                except StopAsyncIteration:
                    break
                yield entry
        except UnableToListDirectory:
            raise
        except Exception as e:
            logger.debug(f"Listing {self.path!r} (deep={self.deep}) failed: {e!r}")
            error = UnableToListDirectory.because(
                error_to_message(e),
                context=self._context(),
                cause=e,
            )
            error.was_aborted = self._abort_signal is not None and self._abort_signal.aborted
            raise error from e
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()
