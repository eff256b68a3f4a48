"""
Random-access async list of page responses.
"""

from __future__ import annotations
import asyncio
import logging
from typing import AsyncIterator, Dict, Generic, List, Optional

from ..runtime.errors import IndexOutOfRangeError
from .cursor import P, PageCursor
from .gather import gather_ordered


logger = logging.getLogger(__name__)


class PageList(Generic[P]):
    """
    0-indexed list of the pages of an endpoint, fetched on demand.

    Fetched pages are cached. Concurrent requests for the same uncached page
    share one fetch. Pages past the last page reported by the server are
    never cached.
    """

    def __init__(self, cursor: PageCursor[P]):
        if not cursor.is_begin:
            raise ValueError("PageList must be built on a BEGIN cursor")
        self._cursor = cursor
        self._pages: List[Optional[P]] = []
        self._lock = asyncio.Lock()
        self._in_flight: Dict[int, asyncio.Task] = {}

    @property
    def endpoint(self) -> Optional[str]:
        return self._cursor.endpoint

    async def _store(self, index: int, page: P) -> None:
        async with self._lock:
            if index >= len(self._pages):
                self._pages.extend([None] * (index + 1 - len(self._pages)))
            self._pages[index] = page

    def _cached(self, index: int) -> Optional[P]:
        if index < len(self._pages):
            return self._pages[index]
        return None

    async def _fetch(self, index: int) -> P:
        page = await self._cursor.fetch_response(index + 1)
        # Page 1 carries the counts even for an empty result set
        if index == 0 or page.current_page <= page.num_pages:
            await self._store(index, page)
        return page

    def _start(self, index: int) -> asyncio.Task:
        task = asyncio.ensure_future(self._fetch(index))
        self._in_flight[index] = task
        task.add_done_callback(lambda _: self._in_flight.pop(index, None))
        return task

    async def _get(self, index: int) -> P:
        cached = self._cached(index)
        if cached is not None:
            return cached

        task = self._in_flight.get(index)
        if task is None:
            task = self._start(index)
        # Other callers may share the fetch, so one cancellation must not end it
        return await asyncio.shield(task)

    async def first(self) -> P:
        """Page 1, fetched once."""
        return await self._get(0)

    async def count(self) -> int:
        """Number of pages."""
        return (await self.first()).num_pages

    async def total(self) -> int:
        """Number of records across all pages."""
        return (await self.first()).total_count

    async def item_at(self, index: int) -> P:
        """
        Get the page at a 0-based index.

        Raises:
            IndexOutOfRangeError: If index is outside [0, count())
        """
        count = await self.count()
        if index < 0 or index >= count:
            raise IndexOutOfRangeError(index, count)
        return await self._get(index)

    async def to_list(self) -> List[P]:
        """Every page in page order; uncached pages are fetched concurrently."""
        count = await self.count()
        logger.debug(f"Loading {count} pages of {self._cursor.endpoint}")

        # Fetches started here are awaited unshielded, so a failure cancels them
        awaitables = []
        for index in range(count):
            if self._cached(index) is None and index not in self._in_flight:
                awaitables.append(self._start(index))
            else:
                awaitables.append(self._get(index))
        return await gather_ordered(awaitables)

    async def __aiter__(self) -> AsyncIterator[P]:
        count = await self.count()
        for index in range(count):
            yield await self._get(index)


__all__ = ["PageList"]
