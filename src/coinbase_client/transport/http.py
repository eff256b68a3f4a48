"""
HTTP send primitives.

A transport is any async callable taking an HttpRequest and returning an
HttpResponse. AiohttpTransport is the network-backed implementation; other
behavior (authentication) is layered on by wrapping a transport.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp

from ..runtime.errors import ClientClosedError
from ..runtime.query import strip_query


logger = logging.getLogger(__name__)


@dataclass
class HttpRequest:
    """An outgoing HTTP request."""
    method: str
    url: str
    body: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def with_url(self, url: str) -> HttpRequest:
        """Copy of this request aimed at another URL."""
        return HttpRequest(self.method, url, self.body, dict(self.headers))


@dataclass
class HttpResponse:
    """A fully-read HTTP response."""
    status: int
    text: str = ""
    reason: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    url: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        return json.loads(self.text)


Send = Callable[[HttpRequest], Awaitable[HttpResponse]]


class AiohttpTransport:
    """
    Transport backed by an aiohttp ClientSession.

    The session is created on first use unless one is supplied; only a
    session created here is closed by close().
    """

    def __init__(self, timeout: float = 30.0, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the transport.

        Args:
            timeout: Total request timeout in seconds
            session: Optional externally-managed session
        """
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self.closed = False

    def _get_session(self) -> aiohttp.ClientSession:
        if self.closed:
            raise ClientClosedError("Transport has been closed")
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            logger.debug("Created HTTP session")
        return self._session

    async def __call__(self, request: HttpRequest) -> HttpResponse:
        session = self._get_session()
        logger.debug(f"{request.method} {strip_query(request.url)}")

        async with session.request(
            request.method,
            request.url,
            data=request.body,
            headers=request.headers,
        ) as response:
            text = await response.text()
            return HttpResponse(
                status=response.status,
                text=text,
                reason=response.reason,
                headers=dict(response.headers),
                url=str(response.url),
            )

    async def close(self) -> None:
        """Close the session if this transport created it."""
        if self.closed:
            return
        self.closed = True
        if self._session is not None and self._owns_session:
            await self._session.close()
            logger.debug("Closed HTTP session")

    async def __aenter__(self) -> AiohttpTransport:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


__all__ = ["HttpRequest", "HttpResponse", "Send", "AiohttpTransport"]
