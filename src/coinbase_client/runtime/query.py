"""
Query-string parameters for Coinbase requests.
"""

from __future__ import annotations
from typing import Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


class QueryParameters(dict):
    """
    Ordered mapping of query-string keys to values.

    Setters ignore None so optional filters can be applied unconditionally.
    Pagination works on copies so the caller's filters are never mutated.
    """

    def __init__(self, *args, **kwargs):
        super().__init__()
        for key, value in dict(*args, **kwargs).items():
            self.set(key, value)

    def set(self, key: str, value: object) -> None:
        """Add or update a parameter, skipping None values."""
        if value is not None:
            self[key] = str(value)

    def copy(self) -> QueryParameters:
        return QueryParameters(self)

    def set_account_id(self, account_id: Optional[str]) -> None:
        self.set("account_id", account_id)

    def set_query(self, query: Optional[str]) -> None:
        self.set("query", query)

    def set_page(self, page: Optional[int]) -> None:
        self.set("page", page)

    def set_limit(self, limit: Optional[int]) -> None:
        self.set("limit", limit)

    def encode(self) -> str:
        """Render as an application/x-www-form-urlencoded string."""
        return urlencode(list(self.items()))


def with_query(url: str, parameters: Mapping[str, str]) -> str:
    """
    Merge parameters into the query string of a URL.

    Keys already present in the URL are overwritten in place rather than
    duplicated; new keys are appended in order. Every other pair of the
    existing query, repeated keys included, is kept as it was.

    Args:
        url: Absolute or relative URL
        parameters: Parameters to merge

    Returns:
        The URL with the merged query string
    """
    parts = urlsplit(url)
    updates = {key: str(value) for key, value in parameters.items() if value is not None}

    pairs = []
    replaced = set()
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key not in updates:
            pairs.append((key, value))
        elif key not in replaced:
            # Repeats of an overwritten key collapse into the first position
            pairs.append((key, updates[key]))
            replaced.add(key)
    pairs.extend((key, value) for key, value in updates.items() if key not in replaced)

    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(pairs), parts.fragment))


def strip_query(url: str) -> str:
    """Drop the query string from a URL, for logging without credentials."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


__all__ = ["QueryParameters", "with_query", "strip_query"]
