"""
Pagination over Coinbase list endpoints.

PageCursor walks pages one at a time or fetches the rest concurrently,
PageList caches pages for random access, and RecordCollection flattens
the records of all pages into one sequence.
"""

from .cursor import CursorState, PageCursor, PageFetcher
from .gather import gather_ordered
from .pages import PageList
from .records import RecordCollection

__all__ = [
    "CursorState",
    "PageCursor",
    "PageFetcher",
    "PageList",
    "RecordCollection",
    "gather_ordered",
]
