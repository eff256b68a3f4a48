"""
Tests for PageCursor.

Covers the BEGIN/POSITIONED/END state machine, range checks, concurrent
fetching of remaining pages and filter parameter handling.
"""

import asyncio
import pytest

from helpers import MockTransport, PagedEndpoint, make_records, mk_page_cursor, query_of

from coinbase_client.pagination import CursorState, PageCursor
from coinbase_client.runtime.errors import HttpError, OutOfPageRangeError
from coinbase_client.runtime.query import QueryParameters


class TestCursorStates:
    """Test cursor construction and state properties."""

    def test_begin_does_no_io(self):
        transport = MockTransport()
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(5)), transport=transport)

        assert cursor.is_begin
        assert cursor.state is CursorState.BEGIN
        assert cursor.response is None
        assert cursor.current_page is None
        assert cursor.num_pages is None
        assert cursor.can_continue
        assert transport.call_count == 0

    def test_end_cursor(self):
        cursor = PageCursor.end()

        assert cursor.is_end
        assert not cursor.can_continue
        assert cursor.total_count is None

    def test_positioned_requires_response(self):
        with pytest.raises(ValueError):
            PageCursor(None, "items")


class TestGetPage:
    """Test fetching single pages."""

    @pytest.mark.asyncio
    async def test_first_page(self):
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(7)), page_size=3)

        page = await cursor.get_next_page()

        assert page.state is CursorState.POSITIONED
        assert page.current_page == 1
        assert page.num_pages == 3
        assert page.total_count == 7
        assert [r["id"] for r in page.response.items] == ["id-0", "id-1", "id-2"]

    @pytest.mark.asyncio
    async def test_walk_to_end(self):
        transport = MockTransport()
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(5)), page_size=2,
                                transport=transport)

        seen = []
        cursor = await cursor.get_next_page()
        while not cursor.is_end:
            seen.append(cursor.current_page)
            cursor = await cursor.get_next_page()

        assert seen == [1, 2, 3]
        assert transport.call_count == 3

    @pytest.mark.asyncio
    async def test_last_page_next_does_no_io(self):
        transport = MockTransport()
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(4)), page_size=2,
                                transport=transport)
        last = await cursor.get_page(2)
        calls = transport.call_count

        assert not last.can_continue
        assert (await last.get_next_page()).is_end
        assert transport.call_count == calls

    @pytest.mark.asyncio
    async def test_page_beyond_known_count_fails_fast(self):
        transport = MockTransport()
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(4)), page_size=2,
                                transport=transport)
        first = await cursor.get_next_page()
        calls = transport.call_count

        with pytest.raises(OutOfPageRangeError) as exc_info:
            await first.get_page(3)

        assert exc_info.value.requested_page == 3
        assert exc_info.value.num_pages == 2
        assert "Re-request" in exc_info.value.message
        assert transport.call_count == calls

    @pytest.mark.asyncio
    async def test_page_below_one_fails(self):
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(4)))

        with pytest.raises(OutOfPageRangeError):
            await cursor.get_page(0)

    @pytest.mark.asyncio
    async def test_empty_result_set_is_end(self):
        cursor = mk_page_cursor(PagedEndpoint("items", []))

        page = await cursor.get_next_page()

        assert page.is_end

    @pytest.mark.asyncio
    async def test_unknown_count_allows_any_page(self):
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(4)), page_size=2)

        page = await cursor.get_page(5)

        assert page.is_end

    @pytest.mark.asyncio
    async def test_filters_are_copied(self):
        transport = MockTransport()
        parameters = QueryParameters(account_id="abc")
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(4)), page_size=2,
                                parameters=parameters, transport=transport)

        await cursor.get_page(2)

        assert parameters == {"account_id": "abc"}
        query = query_of(transport.requests[0])
        assert query["account_id"] == "abc"
        assert query["page"] == "2"
        assert query["limit"] == "2"

    @pytest.mark.asyncio
    async def test_no_limit_without_page_size(self):
        transport = MockTransport()
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(4)), transport=transport)

        await cursor.get_next_page()

        assert "limit" not in query_of(transport.requests[0])


class TestRemainingResponses:
    """Test concurrent retrieval of the remaining pages."""

    @pytest.mark.asyncio
    async def test_from_begin_returns_all_pages_in_order(self):
        endpoint = PagedEndpoint("items", make_records(10), delays={2: 0.05, 3: 0.01})
        cursor = mk_page_cursor(endpoint, page_size=2)

        responses = await cursor.get_remaining_responses()

        assert [r.current_page for r in responses] == [1, 2, 3, 4, 5]
        assert endpoint.requested_pages[0] == 1
        assert endpoint.completed_pages.index(3) < endpoint.completed_pages.index(2)

    @pytest.mark.asyncio
    async def test_from_positioned_returns_following_pages(self):
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(10)), page_size=2)
        second = await cursor.get_page(2)

        responses = await second.get_remaining_responses()

        assert [r.current_page for r in responses] == [3, 4, 5]
        assert len(responses) == second.num_pages - second.current_page

    @pytest.mark.asyncio
    async def test_last_page_does_no_io(self):
        transport = MockTransport()
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(4)), page_size=2,
                                transport=transport)
        last = await cursor.get_page(2)
        calls = transport.call_count

        assert await last.get_remaining_responses() == []
        assert await PageCursor.end().get_remaining_responses() == []
        assert transport.call_count == calls

    @pytest.mark.asyncio
    async def test_empty_result_set(self):
        cursor = mk_page_cursor(PagedEndpoint("items", []))

        assert await cursor.get_remaining_responses() == []

    @pytest.mark.asyncio
    async def test_single_page(self):
        transport = MockTransport()
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(2)), page_size=5,
                                transport=transport)

        responses = await cursor.get_remaining_responses()

        assert len(responses) == 1
        assert transport.call_count == 1

    @pytest.mark.asyncio
    async def test_failure_cancels_siblings(self):
        endpoint = PagedEndpoint(
            "items",
            make_records(8),
            delays={3: 1.0, 4: 1.0},
            failures={2: 500},
        )
        cursor = mk_page_cursor(endpoint, page_size=2)

        with pytest.raises(HttpError) as exc_info:
            await asyncio.wait_for(cursor.get_remaining_responses(), timeout=0.5)

        assert exc_info.value.status == 500
        assert sorted(endpoint.cancelled_pages) == [3, 4]

    @pytest.mark.asyncio
    async def test_remaining_pages_are_cursors(self):
        cursor = mk_page_cursor(PagedEndpoint("items", make_records(6)), page_size=2)

        pages = await cursor.get_remaining_pages()

        assert [p.current_page for p in pages] == [1, 2, 3]
        assert all(p.state is CursorState.POSITIONED for p in pages)
        assert not pages[-1].can_continue
