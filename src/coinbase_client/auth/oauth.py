"""
OAuth2 token exchange with the Coinbase provider.

Both grants POST to the token endpoint with the client credentials and the
grant parameters in the query string.
"""

from __future__ import annotations
import logging
from typing import Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from ..models.auth import AuthResponse
from ..runtime.errors import AuthenticationError, DecodingError
from ..runtime.query import QueryParameters, with_query
from ..transport.http import AiohttpTransport, HttpRequest, Send


logger = logging.getLogger(__name__)

TOKEN_URL = "https://coinbase.com/oauth/token"
AUTHORIZE_URL = "https://coinbase.com/oauth/authorize"


class OAuthClient:
    """
    Client for the OAuth token endpoint.

    Example:
        ```python
        oauth = OAuthClient(client_id, client_secret)
        tokens = await oauth.request_tokens(redirect_uri, code)
        ```
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str = TOKEN_URL,
        authorize_url: str = AUTHORIZE_URL,
        transport: Optional[Send] = None,
    ):
        """
        Initialize the OAuth client.

        Args:
            client_id: Application client id
            client_secret: Application client secret
            token_url: Token endpoint URL
            authorize_url: User consent URL
            transport: Optional transport; an aiohttp transport is created otherwise
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.authorize_url_base = authorize_url
        self._transport = transport or AiohttpTransport()
        self._owns_transport = transport is None

    def _basic_parameters(self) -> Dict[str, str]:
        return {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }

    async def _get_tokens(self, parameters: Dict[str, str]) -> AuthResponse:
        url = with_query(self.token_url, parameters)
        response = await self._transport(HttpRequest("POST", url, body=""))

        if not response.ok:
            raise AuthenticationError(parameters, response.status)

        try:
            return AuthResponse.model_validate_json(response.text)
        except PydanticValidationError as e:
            raise DecodingError("Invalid token response", endpoint=self.token_url, cause=e) from e

    def authorize_url(self, redirect_uri: str, scope: Optional[str] = None,
                      state: Optional[str] = None) -> str:
        """Build the URL the user visits to grant access."""
        parameters = QueryParameters(
            response_type="code",
            client_id=self.client_id,
            redirect_uri=redirect_uri,
        )
        parameters.set("scope", scope)
        parameters.set("state", state)
        return with_query(self.authorize_url_base, parameters)

    async def request_tokens(self, redirect_uri: str, code: str) -> AuthResponse:
        """
        Exchange an authorization code for tokens.

        Raises:
            AuthenticationError: If the provider rejects the exchange
        """
        parameters = self._basic_parameters()
        parameters["grant_type"] = "authorization_code"
        parameters["code"] = code
        parameters["redirect_uri"] = redirect_uri

        logger.info("Exchanging authorization code for tokens")
        return await self._get_tokens(parameters)

    async def refresh_tokens(self, refresh_token: str) -> AuthResponse:
        """
        Exchange a refresh token for a new token pair.

        Raises:
            AuthenticationError: If the provider rejects the refresh
        """
        parameters = self._basic_parameters()
        parameters["grant_type"] = "refresh_token"
        parameters["refresh_token"] = refresh_token

        return await self._get_tokens(parameters)

    async def close(self) -> None:
        if self._owns_transport:
            await self._transport.close()


__all__ = ["OAuthClient", "TOKEN_URL", "AUTHORIZE_URL"]
