"""
Error taxonomy for the Shopify Admin gateway.

Transport and protocol failures are classified once, in the GraphQL
client, and re-raised as one of the ``ShopifyAPIError`` subclasses below.
Each class carries the ``code`` used in the outward tool-result envelope.
"""

from typing import Any, Dict, List, Optional


class ErrorCodes:
    """Codes used in the ``error.code`` field of a failed tool result."""

    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    API_ERROR = "API_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ConfigurationError(Exception):
    """Raised at client construction when required settings are missing."""


class ShopifyAPIError(Exception):
    """Generic transport or protocol failure."""

    code = ErrorCodes.API_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ShopifyRateLimitError(ShopifyAPIError):
    """The shop's query cost bucket is exhausted (``THROTTLED``)."""

    code = ErrorCodes.RATE_LIMIT_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        throttle_status: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status_code)
        self.throttle_status = throttle_status


class ShopifyAuthenticationError(ShopifyAPIError):
    code = ErrorCodes.AUTHENTICATION_ERROR


class ShopifyNotFoundError(ShopifyAPIError):
    code = ErrorCodes.NOT_FOUND


class ShopifyTimeoutError(ShopifyAPIError):
    code = ErrorCodes.TIMEOUT_ERROR


class ShopifyValidationError(ShopifyAPIError):
    """Business-rule rejection of a mutation.

    The client never raises this itself; ``mutate`` returns user errors as
    data. Handlers that prefer to fail fast wrap them in this exception.
    """

    code = ErrorCodes.VALIDATION_ERROR

    def __init__(self, message: str, user_errors: List[Dict[str, Any]]):
        super().__init__(message)
        self.user_errors = user_errors


_RATE_LIMIT_CODES = {"THROTTLED"}
_AUTH_CODES = {"ACCESS_DENIED", "UNAUTHORIZED", "FORBIDDEN"}
_NOT_FOUND_CODES = {"NOT_FOUND"}


def classify_error(
    message: str,
    status_code: Optional[int] = None,
    error_code: Optional[str] = None,
) -> ShopifyAPIError:
    """Map a failed request to a typed error.

    HTTP status and GraphQL ``extensions.code`` are checked first. When
    neither is conclusive, the message is matched against known substrings.
    That fallback is fragile: it depends on Shopify's wording.

    Args:
        message: Error message from the transport or the ``errors`` array.
        status_code: HTTP status of the response, if one was received.
        error_code: ``extensions.code`` of the first GraphQL error, if any.

    Returns:
        An instance of the matching ``ShopifyAPIError`` subclass.
    """
    code = (error_code or "").upper()

    if status_code == 429 or code in _RATE_LIMIT_CODES:
        return ShopifyRateLimitError(
            "Rate limit exceeded. Please retry after a moment.", status_code
        )
    if status_code in (401, 403) or code in _AUTH_CODES:
        return ShopifyAuthenticationError(
            "Invalid access token or authentication failed.", status_code
        )
    if status_code == 404 or code in _NOT_FOUND_CODES:
        return ShopifyNotFoundError(message, status_code)

    # Substring fallback
    if "Throttled" in message:
        return ShopifyRateLimitError(
            "Rate limit exceeded. Please retry after a moment.", status_code
        )
    if "401" in message or "Unauthorized" in message:
        return ShopifyAuthenticationError(
            "Invalid access token or authentication failed.", status_code
        )
    if "404" in message or "not found" in message:
        return ShopifyNotFoundError(message, status_code)

    return ShopifyAPIError(message, status_code)
