"""Classifies structured SOAP faults returned by the Bing Ads services.

Decides whether a fault means an expired token, a per-minute rate limit,
an exhausted bulk quota or something this package does not understand.
Rate-limit kinds get a randomized wait so that callers hitting the limit
together spread their retries.
"""

import logging
import random
from typing import Optional

from bingads.domain.errors import AuthenticationExpired, BulkRateLimited, RateLimited
from bingads.domain.models.call import ClassifiedError, FaultDetail, FaultKind
from bingads.domain.models.common import BackoffPolicy

logger = logging.getLogger(__name__)

AUTHENTICATION_TOKEN_EXPIRED = "AuthenticationTokenExpired"
CALL_RATE_EXCEEDED = "CallRateExceeded"
BULK_CALLS_EXHAUSTED = "BulkServiceNoMoreCallsPermittedForTheTimePeriod"

# https://learn.microsoft.com/en-us/advertising/guides/handle-service-errors-exceptions?view=bingads-13#code-117
RATE_LIMIT_BACKOFF = BackoffPolicy(base_seconds=60, spread_seconds=180)
# https://learn.microsoft.com/en-us/advertising/guides/operation-error-codes?view=bingads-13
BULK_RATE_LIMIT_BACKOFF = BackoffPolicy(base_seconds=900, spread_seconds=180)  # 15-18 minutes


class FaultClassifier:
    """Maps a FaultDetail to a ClassifiedError. First matching rule wins."""

    def __init__(self, rng: Optional[random.Random] = None):
        """Initializes the classifier.

        Args:
            rng: Source of jitter for rate-limit waits. A private
                ``random.Random`` is created when omitted.
        """
        self.rng = rng or random.Random()

    def wait_for(self, policy: BackoffPolicy) -> int:
        return policy["base_seconds"] + self.rng.randrange(policy["spread_seconds"])

    def classify(self, operation: str, detail: FaultDetail) -> ClassifiedError:
        if AUTHENTICATION_TOKEN_EXPIRED in detail.error_codes:
            return ClassifiedError(
                FaultKind.AUTHENTICATION_EXPIRED, AuthenticationExpired.DEFAULT_MESSAGE
            )

        if CALL_RATE_EXCEEDED in detail.error_codes:
            wait = self.wait_for(RATE_LIMIT_BACKOFF)
            logger.debug(f"{operation}: {CALL_RATE_EXCEEDED}, suggested wait {wait}s")
            return ClassifiedError(FaultKind.RATE_LIMITED, RateLimited.DEFAULT_MESSAGE, wait)

        if BULK_CALLS_EXHAUSTED in detail.operation_error_codes:
            wait = self.wait_for(BULK_RATE_LIMIT_BACKOFF)
            logger.debug(f"{operation}: {BULK_CALLS_EXHAUSTED}, suggested wait {wait}s")
            return ClassifiedError(
                FaultKind.BULK_RATE_LIMITED, BulkRateLimited.DEFAULT_MESSAGE, wait
            )

        keys = ", ".join(sorted(str(key) for key in detail.payload))
        return ClassifiedError(
            FaultKind.UNCLASSIFIED,
            f"SOAP error ({keys}) while calling {operation}. Detail: {dict(detail.payload)}",
        )
