from .mocks import (
    MockTransport,
    MockTokenStore,
    PagedEndpoint,
    endpoint_of,
    json_response,
    make_records,
    query_of,
    unauthorized_until_token,
)
from .factories import ItemsPage, mk_client, mk_page_cursor

__all__ = [
    "MockTransport",
    "MockTokenStore",
    "PagedEndpoint",
    "endpoint_of",
    "json_response",
    "make_records",
    "query_of",
    "unauthorized_until_token",
    "ItemsPage",
    "mk_client",
    "mk_page_cursor",
]
