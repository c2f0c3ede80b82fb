"""Defines common Value Objects used across the service-call context."""

from typing import Any, Mapping, NewType, TypedDict

# Using NewType for semantic clarity, although they are strings at runtime.
OperationName = NewType("OperationName", str)      # e.g. 'get_campaigns_by_account_id'
ServiceName = NewType("ServiceName", str)          # e.g. 'campaign_management'
EnvironmentName = NewType("EnvironmentName", str)  # 'production' or 'sandbox'
EndpointUrl = NewType("EndpointUrl", str)          # WSDL address of a service

# Arguments of an operation, passed to the transport untouched
Payload = Mapping[str, Any]


class BackoffPolicy(TypedDict):
    """Value Object describing a randomized wait: base + randrange(spread)."""
    base_seconds: int
    spread_seconds: int
