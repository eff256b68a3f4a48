"""
Base models shared by Coinbase responses.
"""

from __future__ import annotations
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class CoinbaseModel(BaseModel):
    """Base for every Coinbase JSON entity. Unknown fields are ignored."""

    model_config = {"populate_by_name": True, "extra": "ignore"}


class RecordsPage(CoinbaseModel):
    """
    Envelope of every paginated list response.

    current_page is 1-indexed. A response whose current_page exceeds
    num_pages carries no records (an empty or exhausted result set).
    """
    total_count: int = Field(ge=0, description="Number of records across all pages")
    num_pages: int = Field(ge=0, description="Number of pages at the current page size")
    current_page: int = Field(ge=1, description="1-indexed number of this page")


class NativeCurrency(CoinbaseModel):
    """An amount in a fiat currency, e.g. {"amount": "500.12", "currency": "USD"}."""
    amount: Decimal
    currency: str


class RequestResponse(CoinbaseModel):
    """Outcome of a mutating request."""
    success: bool = False
    errors: List[str] = Field(default_factory=list)


class ShortUser(CoinbaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


__all__ = [
    "CoinbaseModel",
    "RecordsPage",
    "NativeCurrency",
    "RequestResponse",
    "ShortUser",
]
