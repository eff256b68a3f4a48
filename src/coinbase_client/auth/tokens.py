"""
Token storage for the Coinbase OAuth flow.

A TokenStore owns the access token, refresh token and expiration time. The
transport only reads tokens and asks the store to refresh; it never writes
token state itself.
"""

from __future__ import annotations
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..models.auth import AuthResponse
from ..runtime.clock import Clock, utcnow
from .oauth import OAuthClient


logger = logging.getLogger(__name__)


@dataclass
class TokenState:
    """Current OAuth tokens."""
    access_token: str
    refresh_token: str
    expires_at: datetime

    def __repr__(self) -> str:
        return f"TokenState(expires_at={self.expires_at.isoformat()})"


class TokenStore(ABC):
    """
    Abstract token store.

    refresh() is safe to call from many concurrent requests: while a refresh
    is in flight every caller awaits that same refresh and sees its result or
    its exception. Once it finishes, the next call starts a new one.
    """

    def __init__(self):
        self._refresh_task: Optional[asyncio.Task] = None

    @abstractmethod
    async def get_access_token(self) -> str:
        pass

    @abstractmethod
    async def get_refresh_token(self) -> str:
        pass

    @abstractmethod
    async def get_expiration(self) -> datetime:
        """Expiration time of the access token (timezone-aware)."""
        pass

    @abstractmethod
    async def _refresh_tokens(self) -> None:
        """Exchange the refresh token for new tokens and persist them."""
        pass

    @property
    def refreshing(self) -> bool:
        """Whether a refresh is currently in flight."""
        return self._refresh_task is not None

    async def refresh(self) -> None:
        """
        Refresh the tokens, joining an in-flight refresh if there is one.

        Raises:
            AuthenticationError: If the provider rejects the refresh
        """
        task = self._refresh_task
        if task is None:
            task = asyncio.ensure_future(self._run_refresh())
            self._refresh_task = task
        else:
            logger.debug("Joining in-flight token refresh")

        # One caller being cancelled must not cancel the shared refresh
        await asyncio.shield(task)

    async def _run_refresh(self) -> None:
        try:
            await self._refresh_tokens()
        finally:
            self._refresh_task = None


class TemporaryTokenStore(TokenStore):
    """
    In-memory token store.

    Tokens live only as long as this object; refreshed tokens are not
    written anywhere else.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        access_token: str,
        refresh_token: str,
        expires_at: datetime,
        oauth: Optional[OAuthClient] = None,
        clock: Clock = utcnow,
    ):
        """
        Initialize the token store.

        Args:
            client_id: Application client id
            client_secret: Application client secret
            access_token: Current access token
            refresh_token: Current refresh token
            expires_at: Access token expiration; naive datetimes are taken as UTC
            oauth: OAuth client used for refreshes
            clock: Source of the current time
        """
        super().__init__()
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        self.state = TokenState(access_token, refresh_token, expires_at)
        self._oauth = oauth or OAuthClient(client_id, client_secret)
        self._clock = clock

    @classmethod
    def from_auth_response(
        cls,
        client_id: str,
        client_secret: str,
        response: AuthResponse,
        oauth: Optional[OAuthClient] = None,
        clock: Clock = utcnow,
    ) -> TemporaryTokenStore:
        """Create a store from a token endpoint response."""
        return cls(
            client_id,
            client_secret,
            response.access_token,
            response.refresh_token,
            clock() + timedelta(seconds=response.expires_in),
            oauth=oauth,
            clock=clock,
        )

    async def get_access_token(self) -> str:
        return self.state.access_token

    async def get_refresh_token(self) -> str:
        return self.state.refresh_token

    async def get_expiration(self) -> datetime:
        return self.state.expires_at

    async def _refresh_tokens(self) -> None:
        response = await self._oauth.refresh_tokens(self.state.refresh_token)
        self.state = TokenState(
            access_token=response.access_token,
            refresh_token=response.refresh_token,
            expires_at=self._clock() + timedelta(seconds=response.expires_in),
        )
        logger.info(f"Refreshed tokens; new expiration {self.state.expires_at.isoformat()}")

    async def close(self) -> None:
        await self._oauth.close()


__all__ = ["TokenState", "TokenStore", "TemporaryTokenStore"]
