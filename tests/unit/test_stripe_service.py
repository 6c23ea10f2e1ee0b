"""
Unit tests for Stripe webhook verification.
Run: pytest tests/unit/test_stripe_service.py -v
"""
import json
import time

import pytest

from app.core.errors import SignatureOrParseError
from app.services.stripe_service import StripeConfigurationError, StripeWebhookConfig, verify_and_parse_event
from tests.helpers import WEBHOOK_SECRET, stripe_event, stripe_signature

CONFIG = StripeWebhookConfig(webhook_secret=WEBHOOK_SECRET)


def signed(event):
    body = json.dumps(event)
    return body.encode("utf-8"), stripe_signature(body)


def test_valid_event_is_returned_as_plain_dict():
    session = {"id": "cs_1", "object": "checkout.session", "customer_details": {"email": "ana@example.com"}}
    payload, signature = signed(stripe_event("checkout.session.completed", session))

    event = verify_and_parse_event(payload, signature, CONFIG)

    assert type(event) is dict
    assert type(event["data"]["object"]) is dict
    assert event["type"] == "checkout.session.completed"
    assert event["data"]["object"]["customer_details"]["email"] == "ana@example.com"


def test_wrong_secret_is_rejected():
    body = json.dumps(stripe_event("customer.created", {"id": "cus_1"}))
    with pytest.raises(SignatureOrParseError):
        verify_and_parse_event(body.encode("utf-8"), stripe_signature(body, secret="whsec_other"), CONFIG)


def test_expired_timestamp_is_rejected():
    body = json.dumps(stripe_event("customer.created", {"id": "cus_1"}))
    old = int(time.time()) - 3600
    with pytest.raises(SignatureOrParseError):
        verify_and_parse_event(body.encode("utf-8"), stripe_signature(body, timestamp=old), CONFIG)


def test_non_json_body_is_rejected():
    with pytest.raises(SignatureOrParseError):
        verify_and_parse_event(b"not json", stripe_signature("not json"), CONFIG)


def test_missing_signature_is_rejected():
    payload, _ = signed(stripe_event("customer.created", {"id": "cus_1"}))
    with pytest.raises(SignatureOrParseError):
        verify_and_parse_event(payload, None, CONFIG)


def test_missing_secret_is_a_configuration_error():
    payload, signature = signed(stripe_event("customer.created", {"id": "cus_1"}))
    with pytest.raises(StripeConfigurationError):
        verify_and_parse_event(payload, signature, StripeWebhookConfig(webhook_secret=None))
