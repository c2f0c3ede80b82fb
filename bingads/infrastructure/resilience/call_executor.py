"""Service for executing Bing Ads operations with automatic retries.

Each attempt is turned into an explicit outcome (success, retryable fault,
terminal fault or transient failure) and the retry loop switches on it:
terminal faults surface at once, rate limits wait for a randomized
fault-specific duration, anything else backs off exponentially.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Mapping, Optional

from bingads.domain.errors import InvalidOperation, StructuredFault, UnhandledFault
from bingads.domain.events.api_events import (
    ApiCallFailed, ApiCallInitiated, ApiCallSucceeded, DomainEvent, RetryScheduled
)
from bingads.domain.interfaces.transport import RpcTransport
from bingads.domain.models.call import (
    CallAttemptState,
    CallRequest,
    FaultDetail,
    Outcome,
    RetryableFault,
    Success,
    TerminalFault,
    TransientFailure,
)
from bingads.domain.models.common import OperationName, Payload
from bingads.infrastructure.resilience.fault_classifier import FaultClassifier

logger = logging.getLogger(__name__)


def log_event(event: DomainEvent) -> None:
    logger.debug(f"EVENT: {event}")


def fault_text(cause: Exception) -> Optional[str]:
    """Returns the remote faultstring, falling back to the exception message."""
    fault = getattr(cause, "fault", None)
    if isinstance(fault, Mapping) and fault.get("faultstring"):
        return str(fault["faultstring"])
    return str(cause) or None


class CallExecutor:
    """Runs one operation against a transport with classification and backoff."""

    def __init__(
        self,
        transport: RpcTransport,
        max_retries: int = 0,
        classifier: Optional[FaultClassifier] = None,
        sleep: Optional[Callable[[float], None]] = None,
        async_sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        event_sink: Callable[[DomainEvent], None] = log_event,
    ):
        """Initializes the CallExecutor.

        Args:
            transport: The transport used for every attempt.
            max_retries: Additional attempts allowed per call (non-negative).
            classifier: Fault classifier; a default one is created if omitted.
            sleep: Blocking wait used by ``execute`` (defaults to ``time.sleep``).
            async_sleep: Wait used by ``execute_async`` (defaults to ``asyncio.sleep``).
            event_sink: Receives the domain events emitted during a call.
        """
        if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
            raise ValueError(f"max_retries must be a non-negative integer, got {max_retries!r}")

        self.transport = transport
        self.max_retries = max_retries
        self.classifier = classifier or FaultClassifier()
        self.sleep = sleep or time.sleep
        self.async_sleep = async_sleep or asyncio.sleep
        self.event_sink = event_sink

        logger.debug(
            f"CallExecutor initialized: transport={type(transport).__name__}, "
            f"max_retries={max_retries}"
        )

    # --- Single attempt ---

    def attempt(self, request: CallRequest) -> Outcome:
        """Makes exactly one transport call and maps the result to an Outcome.

        Never sleeps and never raises for failures of the call itself, so a
        caller with its own scheduler can drive the retries.
        """
        try:
            result = self.transport.invoke(request.operation, request.payload)
        except StructuredFault as fault:
            return self.interpret_fault(request, fault)
        except Exception as error:
            return TransientFailure(error)
        return Success(result)

    async def attempt_async(self, request: CallRequest) -> Outcome:
        try:
            result = await asyncio.to_thread(
                self.transport.invoke, request.operation, request.payload
            )
        except StructuredFault as fault:
            return self.interpret_fault(request, fault)
        except Exception as error:
            return TransientFailure(error)
        return Success(result)

    def interpret_fault(self, request: CallRequest, fault: StructuredFault) -> Outcome:
        detail = FaultDetail.from_fault(fault.fault)
        if detail is None:
            # Unknown fault layout: handled like any other transient failure
            return TransientFailure(fault)

        classified = self.classifier.classify(request.operation, detail)
        if classified.is_retryable:
            return RetryableFault(classified, fault)
        return TerminalFault(classified, fault)

    # --- Retry loop ---

    def execute(self, operation: Optional[str], payload: Optional[Payload] = None) -> Any:
        """Calls ``operation`` and retries it according to the failure kind.

        Args:
            operation: Name of the remote operation.
            payload: Operation arguments, passed to the transport untouched.

        Returns:
            The transport result of the first successful attempt.

        Raises:
            InvalidOperation: If ``operation`` is missing or empty.
            AuthenticationExpired: On the first expired-token fault.
            UnhandledFault: On an unclassified fault, or an unrecognized
                fault layout once retries are exhausted.
            RateLimited, BulkRateLimited: When the rate limit persists
                after all retries.
            Exception: The transport's own error once retries are exhausted.
        """
        request = self._build_request(operation, payload)
        state = CallAttemptState(max_retries=self.max_retries)

        while True:
            started = time.perf_counter()
            self.event_sink(ApiCallInitiated(request.operation, state.retries_made + 1))
            outcome = self.attempt(request)
            if isinstance(outcome, Success):
                return self._succeed(request, state, outcome, started)

            delay = self._next_delay(request, state, outcome)
            self.sleep(delay)
            state.record_retry()

    async def execute_async(self, operation: Optional[str], payload: Optional[Payload] = None) -> Any:
        """Non-blocking variant of ``execute`` with the same decision table.

        The transport runs in a worker thread and waits use ``asyncio.sleep``,
        so cancelling the task interrupts a pending backoff.
        """
        request = self._build_request(operation, payload)
        state = CallAttemptState(max_retries=self.max_retries)

        while True:
            started = time.perf_counter()
            self.event_sink(ApiCallInitiated(request.operation, state.retries_made + 1))
            outcome = await self.attempt_async(request)
            if isinstance(outcome, Success):
                return self._succeed(request, state, outcome, started)

            delay = self._next_delay(request, state, outcome)
            await self.async_sleep(delay)
            state.record_retry()

    # --- Helpers ---

    @staticmethod
    def _build_request(operation: Optional[str], payload: Optional[Payload]) -> CallRequest:
        if operation is None or not str(operation).strip():
            raise InvalidOperation("You must provide an operation")
        return CallRequest(OperationName(str(operation)), payload if payload is not None else {})

    def _succeed(self, request: CallRequest, state: CallAttemptState, outcome: Success, started: float) -> Any:
        latency_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"{request.operation} succeeded on attempt {state.retries_made + 1}")
        self.event_sink(ApiCallSucceeded(request.operation, state.retries_made + 1, latency_ms))
        return outcome.result

    def _next_delay(self, request: CallRequest, state: CallAttemptState, outcome: Outcome) -> float:
        """Returns how long to wait before retrying, or raises the final error."""
        operation = request.operation
        attempt_number = state.retries_made + 1

        if isinstance(outcome, TerminalFault):
            error = outcome.error.to_exception(operation, fault_text(outcome.cause))
            self._fail(operation, attempt_number, error)
            raise error from outcome.cause

        if isinstance(outcome, RetryableFault):
            if not state.can_retry():
                error = outcome.error.to_exception(operation, fault_text(outcome.cause))
                self._fail(operation, attempt_number, error)
                raise error from outcome.cause
            delay = float(outcome.wait_seconds)
            reason = outcome.error.kind.value
        else:
            cause = outcome.cause
            if not state.can_retry():
                if isinstance(cause, StructuredFault):
                    fault = cause.fault if isinstance(cause.fault, Mapping) else {}
                    keys = ", ".join(str(key) for key in fault)
                    error = UnhandledFault(
                        f"SOAP error ({keys}) while calling {operation}. {cause}",
                        operation=operation,
                    )
                    self._fail(operation, attempt_number, error)
                    raise error from cause
                self._fail(operation, attempt_number, cause)
                raise cause
            delay = float(2 ** state.retries_made)
            reason = type(cause).__name__

        logger.warning(
            f"Retryable error calling {operation} on attempt "
            f"{attempt_number}/{self.max_retries + 1}: {reason}. Waiting {delay:.0f}s..."
        )
        self.event_sink(RetryScheduled(operation, attempt_number, delay, reason))
        return delay

    def _fail(self, operation: str, attempt_number: int, error: Exception) -> None:
        logger.error(
            f"Calling {operation} failed definitively on attempt {attempt_number}: "
            f"{type(error).__name__}: {error}"
        )
        self.event_sink(ApiCallFailed(operation, attempt_number, type(error).__name__, str(error)))
