"""
Coinbase Python client

Async client for the Coinbase v1 REST API with OAuth token refresh,
concurrent pagination and fixed-precision bitcoin amounts.
"""

from .client import ClientConfig, CoinbaseClient, DEFAULT_BASE_URL
from .auth import OAuthClient, TokenState, TokenStore, TemporaryTokenStore
from .transport import AiohttpTransport, AuthenticatingTransport, HttpRequest, HttpResponse
from .pagination import CursorState, PageCursor, PageList, RecordCollection
from .runtime.errors import *
from .runtime.units import BitcoinAmount, BitcoinUnit, FixedPrecisionUnit, convert
from .models import *

__version__ = "0.1.0"
