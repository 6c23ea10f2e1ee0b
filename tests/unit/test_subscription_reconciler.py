"""
Unit tests for the Stripe subscription reconciler.
Run: pytest tests/unit/test_subscription_reconciler.py -v
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import UnresolvedAccount
from app.models.profile import PLAN_FREE, PLAN_PREMIUM, PLAN_PROFESSIONAL
from app.models.subscription import Subscription
from app.repositories.profile_repository import ProfileRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.services.subscription_service import PlanPolicy, SubscriptionReconciler
from app.utils.dates import as_utc
from tests.helpers import stripe_event

NOW = datetime(2026, 11, 1, 12, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock(NOW)


@pytest.fixture
def reconciler(db, clock):
    return SubscriptionReconciler(ProfileRepository(db), SubscriptionRepository(db), PlanPolicy(), now=clock)


def checkout(amount=1990, reference="user-ana", email=None, subscription="sub_123"):
    session = {
        "id": "cs_test_1",
        "object": "checkout.session",
        "client_reference_id": reference,
        "customer": "cus_123",
        "subscription": subscription,
        "amount_total": amount,
        "customer_details": {"email": email},
    }
    return stripe_event("checkout.session.completed", session)


def invoice(event_type, subscription="sub_123"):
    return stripe_event(event_type, {"id": "in_1", "object": "invoice", "subscription": subscription})


def deleted(subscription="sub_123"):
    return stripe_event("customer.subscription.deleted", {"id": subscription, "object": "subscription"})


def test_premium_amount_assigns_unlimited_premium(reconciler, profile, db):
    result = reconciler.handle_event(checkout(amount=3790))

    assert result["status"] == "processed"
    db.refresh(profile)
    assert profile.plan == PLAN_PREMIUM
    assert profile.plan_limit is None

    subscription = db.query(Subscription).one()
    assert subscription.status == "active"
    assert subscription.plan_id == PLAN_PREMIUM
    assert subscription.stripe_customer_id == "cus_123"
    assert as_utc(subscription.ends_at) == NOW + timedelta(days=30)


@pytest.mark.parametrize("amount", [1990, 2900, 0, None])
def test_other_amounts_assign_professional(reconciler, make_profile, db, amount):
    profile = make_profile(plan=PLAN_FREE)
    reconciler.handle_event(checkout(amount=amount))

    db.refresh(profile)
    assert profile.plan == PLAN_PROFESSIONAL
    assert profile.plan_limit == 30


def test_redelivered_checkout_keeps_single_subscription(reconciler, profile, db):
    reconciler.handle_event(checkout(amount=3790))
    reconciler.handle_event(checkout(amount=3790))

    rows = db.query(Subscription).filter(Subscription.stripe_subscription_id == "sub_123").all()
    assert len(rows) == 1


def test_redelivered_checkout_after_failed_payment_stays_past_due(reconciler, profile, db, clock):
    reconciler.handle_event(checkout(amount=3790))
    reconciler.handle_event(invoice("invoice.payment_failed"))

    clock.now = NOW + timedelta(days=20)
    result = reconciler.handle_event(checkout(amount=3790))

    assert result == {"status": "ignored", "reason": "subscription_exists"}
    subscription = db.query(Subscription).one()
    assert subscription.status == "past_due"
    assert as_utc(subscription.start_at) == NOW
    assert as_utc(subscription.ends_at) == NOW + timedelta(days=30)


def test_redelivered_checkout_does_not_extend_active_window(reconciler, profile, db, clock):
    reconciler.handle_event(checkout())

    clock.now = NOW + timedelta(days=25)
    reconciler.handle_event(checkout())

    subscription = db.query(Subscription).one()
    assert subscription.status == "active"
    assert as_utc(subscription.ends_at) == NOW + timedelta(days=30)
    db.refresh(profile)
    assert profile.plan == PLAN_PROFESSIONAL


def test_checkout_resolves_profile_by_billing_email(reconciler, make_profile, db):
    profile = make_profile(user_id="user-bia", slug="bia", email="bia@example.com", plan=PLAN_FREE)

    reconciler.handle_event(checkout(reference=None, email="  Bia@Example.COM "))

    db.refresh(profile)
    assert profile.plan == PLAN_PROFESSIONAL
    assert db.query(Subscription).one().user_id == "user-bia"


def test_unresolved_checkout_is_not_applied(reconciler, profile, db):
    with pytest.raises(UnresolvedAccount):
        reconciler.handle_event(checkout(reference=None, email="nobody@example.com"))
    with pytest.raises(UnresolvedAccount):
        reconciler.handle_event(checkout(reference="missing-user"))
    assert db.query(Subscription).count() == 0


def test_checkout_without_subscription_id_is_ignored(reconciler, profile, db):
    result = reconciler.handle_event(checkout(subscription=None))
    assert result == {"status": "ignored", "reason": "missing_subscription_id"}
    assert db.query(Subscription).count() == 0


def test_payment_failed_marks_past_due_without_downgrade(reconciler, profile, db):
    reconciler.handle_event(checkout(amount=3790))
    reconciler.handle_event(invoice("invoice.payment_failed"))

    db.refresh(profile)
    assert profile.plan == PLAN_PREMIUM
    assert profile.plan_limit is None
    assert db.query(Subscription).one().status == "past_due"


def test_payment_succeeded_reactivates_and_extends(reconciler, profile, db, clock):
    reconciler.handle_event(checkout())
    reconciler.handle_event(invoice("invoice.payment_failed"))

    clock.now = NOW + timedelta(days=29)
    reconciler.handle_event(invoice("invoice.payment_succeeded"))

    subscription = db.query(Subscription).one()
    assert subscription.status == "active"
    assert as_utc(subscription.ends_at) == NOW + timedelta(days=59)


def test_invoice_subscription_id_from_parent_details(reconciler, profile, db):
    reconciler.handle_event(checkout())
    event = stripe_event(
        "invoice.payment_failed",
        {"id": "in_2", "parent": {"subscription_details": {"subscription": "sub_123"}}},
    )
    reconciler.handle_event(event)
    assert db.query(Subscription).one().status == "past_due"


@pytest.mark.parametrize("amount", [3790, 1990])
def test_subscription_deleted_resets_to_free(reconciler, profile, db, amount):
    reconciler.handle_event(checkout(amount=amount))
    result = reconciler.handle_event(deleted())

    assert result["status"] == "processed"
    db.refresh(profile)
    assert profile.plan == PLAN_FREE
    assert profile.plan_limit == 5
    assert db.query(Subscription).one().status == "cancelled"


def test_cancelled_subscription_is_terminal(reconciler, profile, db):
    reconciler.handle_event(checkout(amount=3790))
    reconciler.handle_event(deleted())

    late_invoice = reconciler.handle_event(invoice("invoice.payment_succeeded"))
    late_checkout = reconciler.handle_event(checkout(amount=3790))

    assert late_invoice["reason"] == "subscription_cancelled"
    assert late_checkout["reason"] == "subscription_cancelled"
    db.refresh(profile)
    assert profile.plan == PLAN_FREE
    assert db.query(Subscription).one().status == "cancelled"


def test_events_for_unknown_subscription_are_ignored(reconciler, profile, db):
    for event in (invoice("invoice.payment_succeeded"), invoice("invoice.payment_failed"), deleted()):
        assert reconciler.handle_event(event) == {"status": "ignored", "reason": "subscription_not_found"}
    assert db.query(Subscription).count() == 0


def test_unknown_event_type_is_ignored(reconciler, profile):
    result = reconciler.handle_event(stripe_event("customer.created", {"id": "cus_1"}))
    assert result == {"status": "ignored", "reason": "unhandled_event_type"}


def test_plan_policy_uses_configured_premium_price():
    policy = PlanPolicy(premium_price_cents=4990)
    assert policy.classify(4990) == PLAN_PREMIUM
    assert policy.classify(3790) == PLAN_PROFESSIONAL
