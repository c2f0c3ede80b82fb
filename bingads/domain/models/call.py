"""Domain models for a single resilient service call.

Includes the request/attempt state, a typed view over SOAP fault details,
the classification result and the tagged outcome of one attempt.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from ..errors import (
    AuthenticationExpired,
    BingAdsError,
    BulkRateLimited,
    RateLimited,
    UnhandledFault,
)
from .common import OperationName, Payload

# Keys under fault['detail'] that carry a classifiable payload
DETAIL_KEYS = ("api_fault_detail", "ad_api_fault_detail")


# --- Request & attempt state ---

@dataclass(frozen=True)
class CallRequest:
    """One operation call, immutable across attempts."""
    operation: OperationName
    payload: Payload = field(default_factory=dict)


@dataclass
class CallAttemptState:
    """Retry bookkeeping for one top-level call. Never shared between calls."""
    max_retries: int
    retries_made: int = 0

    def can_retry(self) -> bool:
        return self.retries_made < self.max_retries

    def record_retry(self) -> None:
        if not self.can_retry():
            raise RuntimeError(
                f"retry budget exhausted ({self.retries_made}/{self.max_retries})"
            )
        self.retries_made += 1


# --- Fault detail ---

def _collect(node: Any, path: Tuple[str, ...]) -> Iterable[Any]:
    """Yields every value at ``path``, descending into lists along the way.

    Missing keys and non-mapping nodes simply yield nothing.
    """
    if isinstance(node, (list, tuple)):
        for item in node:
            yield from _collect(item, path)
        return
    if not path:
        if node is not None:
            yield node
        return
    if isinstance(node, Mapping):
        yield from _collect(node.get(path[0]), path[1:])


@dataclass(frozen=True)
class FaultDetail:
    """Typed view over ``fault['detail'][<detail_key>]``."""
    detail_key: str
    payload: Mapping[str, Any]
    error_codes: Tuple[str, ...] = ()
    operation_error_codes: Tuple[str, ...] = ()

    @classmethod
    def from_fault(cls, fault: Any) -> Optional["FaultDetail"]:
        """Builds the view from a parsed fault, or None if the shape is unknown."""
        if not isinstance(fault, Mapping):
            return None
        detail = fault.get("detail")
        if not isinstance(detail, Mapping):
            return None
        for key in DETAIL_KEYS:
            payload = detail.get(key)
            if isinstance(payload, Mapping):
                return cls(
                    detail_key=key,
                    payload=payload,
                    error_codes=tuple(
                        str(code) for code in
                        _collect(payload, ("errors", "ad_api_error", "error_code"))
                    ),
                    operation_error_codes=tuple(
                        str(code) for code in
                        _collect(payload, ("operation_errors", "operation_error", "error_code"))
                    ),
                )
        return None


# --- Classification ---

class FaultKind(enum.Enum):
    AUTHENTICATION_EXPIRED = "authentication_expired"
    RATE_LIMITED = "rate_limited"
    BULK_RATE_LIMITED = "bulk_rate_limited"
    UNCLASSIFIED = "unclassified"


_ERROR_TYPES = {
    FaultKind.AUTHENTICATION_EXPIRED: AuthenticationExpired,
    FaultKind.RATE_LIMITED: RateLimited,
    FaultKind.BULK_RATE_LIMITED: BulkRateLimited,
    FaultKind.UNCLASSIFIED: UnhandledFault,
}

RETRYABLE_KINDS = frozenset({FaultKind.RATE_LIMITED, FaultKind.BULK_RATE_LIMITED})


@dataclass(frozen=True)
class ClassifiedError:
    """Result of classifying a structured fault."""
    kind: FaultKind
    message: str
    wait_seconds: Optional[float] = None

    @property
    def is_retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    def to_exception(self, operation: Optional[str] = None, fault_text: Optional[str] = None) -> BingAdsError:
        """Builds the taxonomy error, naming the operation and the remote fault text."""
        error_type = _ERROR_TYPES[self.kind]
        message = self.message
        # unclassified messages already name the operation
        if operation and self.kind is not FaultKind.UNCLASSIFIED:
            message = f"{message} (while calling {operation})"
        if fault_text:
            message = f"{message} Fault: {fault_text}"
        if self.is_retryable:
            return error_type(message, operation=operation, wait_seconds=self.wait_seconds)
        return error_type(message, operation=operation)


# --- Attempt outcomes ---

@dataclass(frozen=True)
class Success:
    result: Any


@dataclass(frozen=True)
class RetryableFault:
    error: ClassifiedError
    cause: Exception

    @property
    def wait_seconds(self) -> float:
        return self.error.wait_seconds or 0.0


@dataclass(frozen=True)
class TerminalFault:
    error: ClassifiedError
    cause: Exception


@dataclass(frozen=True)
class TransientFailure:
    """Any failure that is not a classifiable structured fault."""
    cause: Exception


Outcome = Union[Success, RetryableFault, TerminalFault, TransientFailure]
