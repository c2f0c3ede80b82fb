import random

import pytest
from unittest.mock import MagicMock

from bingads.domain.models.call import FaultDetail, FaultKind
from bingads.infrastructure.resilience.fault_classifier import (
    AUTHENTICATION_TOKEN_EXPIRED,
    BULK_CALLS_EXHAUSTED,
    CALL_RATE_EXCEEDED,
    FaultClassifier,
)


def detail_of(fault) -> FaultDetail:
    detail = FaultDetail.from_fault(fault.fault)
    assert detail is not None
    return detail


@pytest.fixture
def fixed_rng():
    rng = MagicMock(spec=random.Random)
    rng.randrange.return_value = 0
    return rng


def test_expired_token(make_fault):
    classified = FaultClassifier().classify("get_account", detail_of(make_fault(AUTHENTICATION_TOKEN_EXPIRED)))
    assert classified.kind is FaultKind.AUTHENTICATION_EXPIRED
    assert classified.wait_seconds is None
    assert not classified.is_retryable


def test_expired_token_wins_over_bulk_quota(make_fault):
    fault = make_fault(AUTHENTICATION_TOKEN_EXPIRED, operation_error_code=BULK_CALLS_EXHAUSTED)
    assert FaultClassifier().classify("op", detail_of(fault)).kind is FaultKind.AUTHENTICATION_EXPIRED


def test_call_rate_wins_over_bulk_quota(make_fault):
    fault = make_fault(CALL_RATE_EXCEEDED, operation_error_code=BULK_CALLS_EXHAUSTED)
    assert FaultClassifier().classify("op", detail_of(fault)).kind is FaultKind.RATE_LIMITED


def test_rate_limit_wait_uses_injected_rng(make_fault, fixed_rng):
    fixed_rng.randrange.return_value = 179
    classified = FaultClassifier(rng=fixed_rng).classify("op", detail_of(make_fault(CALL_RATE_EXCEEDED)))

    assert classified.kind is FaultKind.RATE_LIMITED
    assert classified.wait_seconds == 239
    fixed_rng.randrange.assert_called_once_with(180)


def test_bulk_wait_lower_bound(make_fault, fixed_rng):
    fault = make_fault(operation_error_code=BULK_CALLS_EXHAUSTED)
    classified = FaultClassifier(rng=fixed_rng).classify("op", detail_of(fault))

    assert classified.kind is FaultKind.BULK_RATE_LIMITED
    assert classified.wait_seconds == 900


def test_wait_is_drawn_on_every_classification(make_fault):
    classifier = FaultClassifier(rng=random.Random(1234))
    detail = detail_of(make_fault(CALL_RATE_EXCEEDED))

    waits = [classifier.classify("op", detail).wait_seconds for _ in range(200)]

    assert all(60 <= w < 240 for w in waits)
    assert len(set(waits)) > 1


def test_bulk_waits_stay_in_range(make_fault):
    classifier = FaultClassifier(rng=random.Random(99))
    detail = detail_of(make_fault(operation_error_code=BULK_CALLS_EXHAUSTED))
    assert all(900 <= classifier.classify("op", detail).wait_seconds < 1080 for _ in range(200))


def test_codes_inside_error_lists_are_found(make_fault):
    fault = make_fault(extra={
        "errors": {"ad_api_error": [
            {"error_code": "InvalidAccount"},
            {"error_code": CALL_RATE_EXCEEDED},
        ]}
    })
    assert FaultClassifier().classify("op", detail_of(fault)).kind is FaultKind.RATE_LIMITED


def test_api_fault_detail_key_is_classified_too(make_fault):
    fault = make_fault(operation_error_code=BULK_CALLS_EXHAUSTED, detail_key="api_fault_detail")
    assert FaultClassifier().classify("op", detail_of(fault)).kind is FaultKind.BULK_RATE_LIMITED


def test_unclassified_message_names_operation_and_keys(make_fault):
    fault = make_fault("CampaignServiceInvalidBudget", extra={"batch_errors": None})
    classified = FaultClassifier().classify("update_campaigns", detail_of(fault))

    assert classified.kind is FaultKind.UNCLASSIFIED
    assert classified.message.startswith("SOAP error (batch_errors, errors, tracking_id) while calling update_campaigns.")
    assert "CampaignServiceInvalidBudget" in classified.message


def test_missing_intermediate_keys_fall_through(make_fault):
    fault = make_fault(extra={"errors": None, "operation_errors": {"operation_error": None}})
    assert FaultClassifier().classify("op", detail_of(fault)).kind is FaultKind.UNCLASSIFIED
