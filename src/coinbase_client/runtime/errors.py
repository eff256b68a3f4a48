"""
Coinbase Client Error Model

This module provides the error handling framework for the Coinbase client.
Every failure surfaced by the library is a CoinbaseError subclass carrying
enough context (endpoint, page, index, HTTP status) to diagnose it.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Coinbase client error codes."""

    # Success
    OK = 0

    # General errors (1-99)
    UNKNOWN = 1
    CLIENT_CLOSED = 2

    # HTTP errors (100-199)
    HTTP_ERROR = 100
    NOT_FOUND = 101

    # Authentication errors (200-299)
    AUTHENTICATION_FAILED = 200

    # Pagination errors (300-399)
    PAGE_OUT_OF_RANGE = 300
    INDEX_OUT_OF_RANGE = 301

    # Encoding errors (400-499)
    DECODING_ERROR = 400
    CURRENCY_MISMATCH = 401
    VALIDATION_ERROR = 402


# Parameters whose values must never appear in error messages
_SECRET_PARAMETERS = ("client_secret", "refresh_token", "access_token", "code")


class CoinbaseError(Exception):
    """
    Root of every error raised by the client.

    Subclasses put the request context in ``details``: the endpoint and HTTP
    status of a failed call, the page or index asked for, or the masked
    OAuth parameters of a rejected grant.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Args:
            message: Human-readable summary
            code: ErrorCode identifying the failure family
            details: Request context such as endpoint, status or page
            cause: pydantic or transport exception this error wraps, if any
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """Summary, then request context, then the wrapped exception."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form for structured logs; secrets are already masked."""
        result = {
            "error": type(self).__name__,
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ClientClosedError(CoinbaseError):
    """Operation attempted on a closed client or transport."""

    def __init__(self, message: str = "Client has been closed"):
        super().__init__(message, ErrorCode.CLIENT_CLOSED)


class AuthenticationError(CoinbaseError):
    """The OAuth provider rejected a token request."""

    def __init__(self, parameters: Dict[str, str], status: int, cause: Optional[Exception] = None):
        masked = {
            key: ("***" if key in _SECRET_PARAMETERS else value)
            for key, value in parameters.items()
        }
        super().__init__(
            f"Coinbase authorization failed with HTTP status {status}",
            ErrorCode.AUTHENTICATION_FAILED,
            {"status": status, "parameters": masked},
            cause,
        )
        self.parameters = dict(parameters)
        self.status = status


class HttpError(CoinbaseError):
    """Non-success HTTP status returned by the API."""

    def __init__(self, status: int, endpoint: str, reason: Optional[str] = None,
                 message: Optional[str] = None, code: ErrorCode = ErrorCode.HTTP_ERROR):
        if message is None:
            message = f"HTTP {status}"
            if reason:
                message += f": {reason}"
        super().__init__(message, code, {"status": status, "endpoint": endpoint})
        self.status = status
        self.endpoint = endpoint
        self.reason = reason


class ResourceNotFoundError(HttpError):
    """No resource exists at the queried endpoint. Raised on 404s."""

    def __init__(self, endpoint: str):
        super().__init__(
            404,
            endpoint,
            "Not Found",
            message=f"Could not find resource at this endpoint: {endpoint}",
            code=ErrorCode.NOT_FOUND,
        )


class OutOfPageRangeError(CoinbaseError):
    """A page beyond the last known page was requested."""

    def __init__(self, requested_page: int, num_pages: Optional[int]):
        if num_pages is None:
            message = f"Requested page {requested_page}, but pages are numbered from 1."
        else:
            message = (
                f"Requested page {requested_page}, but there are only {num_pages} pages. "
                "Re-request the initial page to check for new pages."
            )
        super().__init__(
            message,
            ErrorCode.PAGE_OUT_OF_RANGE,
            {"requested_page": requested_page, "num_pages": num_pages},
        )
        self.requested_page = requested_page
        self.num_pages = num_pages


class IndexOutOfRangeError(CoinbaseError, IndexError):
    """A flattened record or page index outside [0, count) was requested."""

    def __init__(self, index: int, count: int):
        super().__init__(
            f"The index {index} was out of the range of the list of length {count}.",
            ErrorCode.INDEX_OUT_OF_RANGE,
            {"index": index, "count": count},
        )
        self.index = index
        self.count = count


class DecodingError(CoinbaseError, ValueError):
    """Malformed or unexpected JSON returned by the API."""

    def __init__(self, message: str, endpoint: Optional[str] = None,
                 code: ErrorCode = ErrorCode.DECODING_ERROR, cause: Optional[Exception] = None,
                 details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if endpoint:
            details["endpoint"] = endpoint
        super().__init__(message, code, details, cause)
        self.endpoint = endpoint


class CurrencyMismatchError(DecodingError):
    """A currency amount carried an unexpected currency code."""

    def __init__(self, expected: str, actual: Any):
        super().__init__(
            f"Currency from Coinbase must be {expected}, got {actual!r}",
            code=ErrorCode.CURRENCY_MISMATCH,
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class ValidationError(CoinbaseError):
    """A request body does not satisfy its schema."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details, cause)


def error_for_status(status: int, endpoint: str, reason: Optional[str] = None) -> Optional[CoinbaseError]:
    """
    Create an appropriate error for an HTTP status code.

    Args:
        status: HTTP status code of the response
        endpoint: Endpoint that was queried
        reason: Optional reason phrase

    Returns:
        Appropriate error instance or None for success statuses
    """
    if 200 <= status < 300:
        return None
    if status == 404:
        return ResourceNotFoundError(endpoint)
    return HttpError(status, endpoint, reason)


__all__ = [
    "ErrorCode",
    "CoinbaseError",
    "ClientClosedError",
    "AuthenticationError",
    "HttpError",
    "ResourceNotFoundError",
    "OutOfPageRangeError",
    "IndexOutOfRangeError",
    "DecodingError",
    "CurrencyMismatchError",
    "ValidationError",
    "error_for_status",
]
