"""
HTTP transports for the Coinbase client.

Transports are async callables from HttpRequest to HttpResponse and are
composed by wrapping: AuthenticatingTransport(AiohttpTransport(), store).
"""

from .http import HttpRequest, HttpResponse, Send, AiohttpTransport
from .auth import AuthenticatingTransport, DEFAULT_REFRESH_MARGIN

__all__ = [
    "HttpRequest",
    "HttpResponse",
    "Send",
    "AiohttpTransport",
    "AuthenticatingTransport",
    "DEFAULT_REFRESH_MARGIN",
]
