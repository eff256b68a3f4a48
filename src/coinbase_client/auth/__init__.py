"""
OAuth token handling for the Coinbase client.
"""

from .oauth import OAuthClient, TOKEN_URL, AUTHORIZE_URL
from .tokens import TokenState, TokenStore, TemporaryTokenStore

__all__ = [
    "OAuthClient",
    "TOKEN_URL",
    "AUTHORIZE_URL",
    "TokenState",
    "TokenStore",
    "TemporaryTokenStore",
]
