"""
OAuth token endpoint responses.
"""

from __future__ import annotations
from typing import Optional

from pydantic import Field

from .base import CoinbaseModel


class AuthResponse(CoinbaseModel):
    """Tokens issued by the OAuth token endpoint."""
    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)
    token_type: Optional[str] = None
    expires_in: int = Field(ge=0, description="Access token lifetime in seconds")
    scope: Optional[str] = None


__all__ = ["AuthResponse"]
