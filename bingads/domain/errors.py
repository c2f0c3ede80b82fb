"""Error taxonomy for Bing Ads service calls.

Terminal errors (InvalidOperation, AuthenticationExpired, UnhandledFault) are
never retried. Rate-limit errors are retried by the call executor until the
retry budget runs out. Transport failures are raised by the transport and
reach the caller unchanged once retries are exhausted.
"""

from typing import Any, Mapping, Optional, Tuple


class BingAdsError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.message = message
        self.operation = operation
        super().__init__(message)


# --- Configuration (not part of the retry taxonomy) ---

class ConfigurationError(BingAdsError):
    """Raised while building a service: bad environment, service name, etc."""


class AuthenticationParamsMissing(ConfigurationError):
    """Neither an OAuth token nor a username/password pair was supplied."""


# --- Call taxonomy ---

class InvalidOperation(BingAdsError):
    """Missing or empty operation identifier."""


class AuthenticationExpired(BingAdsError):
    """The authentication token must be renewed."""

    DEFAULT_MESSAGE = "renew authentication token or obtain a new one."

    def __init__(self, message: str = DEFAULT_MESSAGE, operation: Optional[str] = None):
        super().__init__(message, operation)


class RateLimited(BingAdsError):
    """Per-minute call quota exceeded (CallRateExceeded)."""

    DEFAULT_MESSAGE = "Rate limit exceeded. Please try again later."
    wait_range: Tuple[int, int] = (60, 240)

    def __init__(
        self,
        message: str = DEFAULT_MESSAGE,
        operation: Optional[str] = None,
        wait_seconds: Optional[float] = None,
    ):
        super().__init__(message, operation)
        self.wait_seconds = wait_seconds


class BulkRateLimited(BingAdsError):
    """Bulk service quota for the current period is exhausted."""

    DEFAULT_MESSAGE = "Bulk API Rate limit exceeded. Please try again later."
    wait_range: Tuple[int, int] = (900, 1080)

    def __init__(
        self,
        message: str = DEFAULT_MESSAGE,
        operation: Optional[str] = None,
        wait_seconds: Optional[float] = None,
    ):
        super().__init__(message, operation)
        self.wait_seconds = wait_seconds


class UnhandledFault(BingAdsError):
    """A structured fault this package does not know how to handle."""


# Entity names whose plural is not formed with a suffix
_IRREGULAR_PLURALS = {"criterion": "criteria"}


def _plural(phrase: str) -> str:
    """Pluralizes the last word of an entity name."""
    head, _, word = phrase.rpartition(" ")
    if word in _IRREGULAR_PLURALS:
        word = _IRREGULAR_PLURALS[word]
    elif word in _IRREGULAR_PLURALS.values():
        pass
    elif word.endswith("y") and word[-2:-1] not in ("", "a", "e", "i", "o", "u"):
        word = word[:-1] + "ies"
    elif not word.endswith("s"):
        word += "s"
    return f"{head} {word}" if head else word


class LimitError(BingAdsError):
    """Too many entities sent in a single call."""

    def __init__(self, operation: str, limit: int, entity_type: str):
        noun = _plural(entity_type.replace("_", " ").lower())
        super().__init__(
            f"can not {operation} more than {limit} {noun} in a single call",
            operation,
        )
        self.limit = limit
        self.entity_type = entity_type


# --- Transport failures (raised by transports, consumed by the executor) ---

class TransportFailure(BingAdsError):
    """Base class for failures raised by an RpcTransport."""


class StructuredFault(TransportFailure):
    """The remote side answered with a fault carrying a parsed body.

    ``fault`` is the fault element as a nested mapping, for example
    ``{"faultcode": ..., "faultstring": ..., "detail": {"ad_api_fault_detail": {...}}}``.
    """

    def __init__(self, message: str, fault: Mapping[str, Any], operation: Optional[str] = None):
        super().__init__(message, operation)
        self.fault = fault


class NetworkError(TransportFailure):
    """Connection, timeout or HTTP-level failure with no fault body."""


class InvalidResponse(TransportFailure):
    """The transport received a response it could not parse."""
