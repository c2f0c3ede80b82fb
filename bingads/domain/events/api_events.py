"""Domain Events related to service calls and resilience.

Emitted by the call executor when a call starts, succeeds, is retried or
fails definitively.
"""

from dataclasses import dataclass, field
import time


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when an attempt is about to be made."""
    operation: str
    attempt_number: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when an attempt succeeds."""
    operation: str
    attempt_number: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when a call fails definitively (terminal or exhausted)."""
    operation: str
    attempt_number: int
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled after a failed attempt."""
    operation: str
    attempt_number: int
    delay_seconds: float
    reason: str  # fault kind or exception type
    timestamp: float = field(default_factory=time.time)
