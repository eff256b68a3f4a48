"""
Page cursors over paginated Coinbase endpoints.

A PageCursor is a position in the page sequence of one endpoint and one set
of filter parameters. It is in one of three states:

- BEGIN: nothing fetched yet, the page count is unknown
- POSITIONED: holds the response for one page
- END: past the last page; carries no data

Cursors are immutable. Advancing returns a new cursor sharing the endpoint,
filters and page size of the old one.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

from ..models.base import RecordsPage
from ..runtime.errors import OutOfPageRangeError
from ..runtime.query import QueryParameters
from .gather import gather_ordered


logger = logging.getLogger(__name__)

P = TypeVar("P", bound=RecordsPage)

PageFetcher = Callable[[str, QueryParameters], Awaitable[P]]


class CursorState(Enum):
    BEGIN = "begin"
    POSITIONED = "positioned"
    END = "end"


class PageCursor(Generic[P]):
    """
    Cursor over the pages of a paginated endpoint.

    Example:
        ```python
        cursor = client.begin_pages("transfers", TransfersPage, page_size=25)
        cursor = await cursor.get_next_page()
        while not cursor.is_end:
            handle(cursor.response)
            cursor = await cursor.get_next_page()
        ```
    """

    def __init__(
        self,
        fetch: Optional[PageFetcher],
        endpoint: Optional[str],
        page_size: Optional[int] = None,
        parameters: Optional[QueryParameters] = None,
        response: Optional[P] = None,
        state: CursorState = CursorState.POSITIONED,
    ):
        if state is CursorState.POSITIONED and response is None:
            raise ValueError("A positioned cursor needs a page response")
        self._fetch = fetch
        self._endpoint = endpoint
        self._page_size = page_size
        self._parameters = parameters
        self._response = response
        self._state = state

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def begin(
        cls,
        fetch: PageFetcher,
        endpoint: str,
        page_size: Optional[int] = None,
        parameters: Optional[QueryParameters] = None,
    ) -> PageCursor[P]:
        """
        Create a cursor before the first page. Performs no I/O.

        Args:
            fetch: Typed GET used to retrieve a page
            endpoint: Endpoint relative to the API root
            page_size: Optional number of records per page
            parameters: Filter parameters applied to every page request
        """
        return cls(fetch, endpoint, page_size, parameters, state=CursorState.BEGIN)

    @classmethod
    def end(cls) -> PageCursor[P]:
        """Create a cursor past the last page."""
        return cls(None, None, state=CursorState.END)

    def _positioned(self, response: P) -> PageCursor[P]:
        return type(self)(
            self._fetch,
            self._endpoint,
            self._page_size,
            self._parameters,
            response,
            CursorState.POSITIONED,
        )

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def is_begin(self) -> bool:
        return self._state is CursorState.BEGIN

    @property
    def is_end(self) -> bool:
        return self._state is CursorState.END

    @property
    def response(self) -> Optional[P]:
        """The page response of a positioned cursor."""
        return self._response

    @property
    def endpoint(self) -> Optional[str]:
        return self._endpoint

    @property
    def page_size(self) -> Optional[int]:
        return self._page_size

    @property
    def current_page(self) -> Optional[int]:
        return self._response.current_page if self._response is not None else None

    @property
    def num_pages(self) -> Optional[int]:
        return self._response.num_pages if self._response is not None else None

    @property
    def total_count(self) -> Optional[int]:
        return self._response.total_count if self._response is not None else None

    @property
    def can_continue(self) -> bool:
        """Whether a following page may exist."""
        if self.is_end:
            return False
        if self.is_begin:
            return True
        return self.current_page < self.num_pages

    # =========================================================================
    # Fetching
    # =========================================================================

    async def fetch_response(self, page: int) -> P:
        """
        Fetch the raw response for a page without moving the cursor.

        Unlike get_page, an empty result set still yields its response.

        Raises:
            OutOfPageRangeError: If the page is below 1 or exceeds the known
                page count
        """
        if self.is_end:
            raise OutOfPageRangeError(page, 0)

        num_pages = self.num_pages
        if page < 1:
            raise OutOfPageRangeError(page, None)
        if num_pages is not None and page > num_pages:
            raise OutOfPageRangeError(page, num_pages)

        parameters = self._parameters.copy() if self._parameters is not None else QueryParameters()
        parameters.set_page(page)
        parameters.set_limit(self._page_size)

        logger.debug(f"Fetching page {page} of {self._endpoint}")
        return await self._fetch(self._endpoint, parameters)

    async def get_page(self, page: int) -> PageCursor[P]:
        """
        Fetch a page by number.

        Args:
            page: 1-indexed page number

        Returns:
            A cursor positioned at that page, or an END cursor when the
            response reports no records on it

        Raises:
            OutOfPageRangeError: If the page exceeds the known page count
        """
        response = await self.fetch_response(page)

        if response.current_page > response.num_pages:
            return self.end()

        return self._positioned(response)

    async def get_next_page(self) -> PageCursor[P]:
        """Fetch the page after this one; END without I/O if there is none."""
        if not self.can_continue:
            return self.end()

        page = 1 if self.is_begin else self.current_page + 1
        return await self.get_page(page)

    async def get_remaining_responses(self) -> List[P]:
        """
        Fetch every page after this one.

        From a BEGIN cursor, page 1 is fetched first to learn the page count.
        The remaining pages are fetched concurrently and returned in
        ascending page order. If any fetch fails the others are cancelled
        and the error is raised.

        Returns:
            Page responses after the current position, in page order
        """
        if not self.can_continue:
            return []

        first: Optional[PageCursor[P]] = None
        if self.is_begin:
            first = await self.get_page(1)
            if first.is_end:
                return []
            start, end = first.current_page + 1, first.num_pages
            source = first
        else:
            start, end = self.current_page + 1, self.num_pages
            source = self

        if end >= start:
            logger.debug(f"Fetching pages {start}..{end} of {self._endpoint} concurrently")

        remaining = await gather_ordered(
            source.fetch_response(page) for page in range(start, end + 1)
        )

        if first is not None:
            return [first.response] + remaining
        return remaining

    async def get_remaining_pages(self) -> List[PageCursor[P]]:
        """Like get_remaining_responses, with each page wrapped in a cursor."""
        return [self._positioned(response) for response in await self.get_remaining_responses()]

    def __repr__(self) -> str:
        if self._state is CursorState.POSITIONED:
            return f"PageCursor({self._endpoint!r}, page {self.current_page}/{self.num_pages})"
        return f"PageCursor({self._state.name})"


__all__ = ["CursorState", "PageCursor", "PageFetcher"]
