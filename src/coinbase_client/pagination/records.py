"""
Flat view over the records of a paginated endpoint.
"""

from __future__ import annotations
from typing import AsyncIterator, Callable, Generic, List, Sequence, TypeVar

from ..runtime.errors import DecodingError, IndexOutOfRangeError
from .cursor import P
from .pages import PageList

R = TypeVar("R")


class RecordCollection(Generic[P, R]):
    """
    0-indexed async sequence of records spread over pages.

    Record lookup assumes every page except the last holds as many records
    as page 1.

    Example:
        ```python
        transfers = client.transfers()
        total = await transfers.count()
        latest = await transfers.item_at(0)
        ```
    """

    def __init__(self, pages: PageList[P], projection: Callable[[P], Sequence[R]]):
        """
        Initialize the collection.

        Args:
            pages: Page list to read from
            projection: Extracts the records of one page
        """
        self.pages = pages
        self.projection = projection

    async def count(self) -> int:
        """Total number of records."""
        return await self.pages.total()

    async def item_at(self, index: int) -> R:
        """
        Get the record at a flat 0-based index.

        Raises:
            IndexOutOfRangeError: If index is outside [0, count())
            DecodingError: If page 1 holds no records while total_count is positive
        """
        count = await self.count()
        if index < 0 or index >= count:
            raise IndexOutOfRangeError(index, count)

        items_per_page = len(self.projection(await self.pages.first()))
        if items_per_page == 0:
            raise DecodingError(
                f"Page 1 of {self.pages.endpoint} holds no records but total_count is {count}",
                self.pages.endpoint,
            )
        page = await self.pages.item_at(index // items_per_page)
        return self.projection(page)[index % items_per_page]

    async def to_flat_list(self) -> List[R]:
        """All records in page order."""
        records: List[R] = []
        for page in await self.pages.to_list():
            records.extend(self.projection(page))
        return records

    async def __aiter__(self) -> AsyncIterator[R]:
        async for page in self.pages:
            for record in self.projection(page):
                yield record


__all__ = ["RecordCollection"]
