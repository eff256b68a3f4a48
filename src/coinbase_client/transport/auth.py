"""
Access-token injection with pre-emptive and reactive token refresh.

AuthenticatingTransport wraps another transport. For every request it:

1. refreshes the tokens first if they expire within the refresh margin,
2. sets the access_token query parameter,
3. sends the request,
4. returns the response unless it is a 401 and no refresh happened yet,
5. otherwise refreshes, re-attaches the new token and sends exactly once more.

Refresh failures propagate to the caller. A request is sent at most twice.
"""

from __future__ import annotations
import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Union

from ..runtime.clock import Clock, utcnow
from ..runtime.query import strip_query, with_query
from .http import HttpRequest, HttpResponse, Send

if TYPE_CHECKING:
    from ..auth.tokens import TokenStore


logger = logging.getLogger(__name__)

UNAUTHORIZED = 401
DEFAULT_REFRESH_MARGIN = timedelta(minutes=1)


class AuthenticatingTransport:
    """
    Transport that authenticates requests with tokens from a TokenStore.

    The margin compensates for clock drift and for the latency between the
    provider issuing tokens and the store recording their expiration.
    """

    def __init__(
        self,
        send: Send,
        token_store: TokenStore,
        refresh_margin: Union[timedelta, float] = DEFAULT_REFRESH_MARGIN,
        clock: Clock = utcnow,
    ):
        """
        Initialize the transport.

        Args:
            send: Transport that performs the HTTP exchange
            token_store: Source of tokens
            refresh_margin: Refresh when this close to expiry (timedelta or seconds)
            clock: Source of the current time
        """
        if not isinstance(refresh_margin, timedelta):
            refresh_margin = timedelta(seconds=refresh_margin)
        self.send = send
        self.token_store = token_store
        self.refresh_margin = refresh_margin
        self.clock = clock

    async def _expires_soon(self) -> bool:
        expiration = await self.token_store.get_expiration()
        return self.clock() >= expiration - self.refresh_margin

    async def _authenticate(self, request: HttpRequest) -> HttpRequest:
        access_token = await self.token_store.get_access_token()
        if access_token is None:
            return request
        return request.with_url(with_query(request.url, {"access_token": access_token}))

    async def __call__(self, request: HttpRequest) -> HttpResponse:
        refreshed = False

        if await self._expires_soon():
            logger.info("Access token expired or about to expire; refreshing before request")
            await self.token_store.refresh()
            refreshed = True

        response = await self.send(await self._authenticate(request))

        if response.status != UNAUTHORIZED:
            return response

        if refreshed:
            logger.warning(
                f"{request.method} {strip_query(request.url)} returned 401 with freshly refreshed tokens"
            )
            return response

        # Tokens may have been revoked or our expiry tracking is off
        logger.info(f"{request.method} {strip_query(request.url)} returned 401; refreshing tokens and resending")
        await self.token_store.refresh()

        return await self.send(await self._authenticate(request))

    async def close(self) -> None:
        """Close the wrapped transport if it can be closed."""
        close = getattr(self.send, "close", None)
        if close is not None:
            await close()


__all__ = ["AuthenticatingTransport", "DEFAULT_REFRESH_MARGIN"]
