"""
Subscription validity rule tests
"""

import pytest
from datetime import timedelta, timezone

from rentalshop.core.tenant_manager import is_subscription_valid
from rentalshop.models.subscription import SubscriptionStatus
from tests.factories import NOW, make_subscription


def test_missing_subscription_is_invalid():
    assert is_subscription_valid(None, NOW) is False


@pytest.mark.parametrize("status", [SubscriptionStatus.CANCELLED, SubscriptionStatus.PAST_DUE])
def test_cancelled_and_past_due_are_invalid_even_within_period(status):
    subscription = make_subscription(status=status, current_period_end=NOW + timedelta(days=365))
    assert is_subscription_valid(subscription, NOW) is False


def test_active_subscription_depends_on_period_end():
    current = make_subscription(current_period_end=NOW + timedelta(minutes=1))
    lapsed = make_subscription(current_period_end=NOW - timedelta(minutes=1))

    assert is_subscription_valid(current, NOW) is True
    assert is_subscription_valid(lapsed, NOW) is False


def test_period_ending_exactly_now_is_invalid():
    subscription = make_subscription(current_period_end=NOW + timedelta(days=1))
    subscription.current_period_end = NOW

    assert is_subscription_valid(subscription, NOW) is False


def test_trial_uses_trial_end_before_period_end():
    subscription = make_subscription(
        status=SubscriptionStatus.TRIAL,
        trial_ends_at=NOW + timedelta(days=1),
        current_period_end=NOW - timedelta(days=1),
    )
    assert is_subscription_valid(subscription, NOW) is True


def test_trial_without_trial_end_falls_back_to_period_end():
    subscription = make_subscription(status=SubscriptionStatus.TRIAL, current_period_end=NOW + timedelta(days=1))
    assert is_subscription_valid(subscription, NOW) is True

    subscription.current_period_end = NOW - timedelta(days=1)
    assert is_subscription_valid(subscription, NOW) is False


def test_missing_period_end_is_invalid():
    subscription = make_subscription()
    subscription.current_period_end = None

    assert is_subscription_valid(subscription, NOW) is False


def test_timezone_aware_values_are_compared_in_utc():
    subscription = make_subscription(
        current_period_end=(NOW + timedelta(hours=1)).replace(tzinfo=timezone.utc),
    )
    plus_two = timezone(timedelta(hours=2))

    # 13:30 at UTC+2 is 11:30 UTC, before the 13:00 UTC period end
    assert is_subscription_valid(subscription, NOW.replace(hour=13, minute=30, tzinfo=plus_two)) is True
    assert is_subscription_valid(subscription, NOW + timedelta(hours=2)) is False


def test_defaults_to_current_time():
    subscription = make_subscription(current_period_end=NOW - timedelta(days=3650))
    assert is_subscription_valid(subscription) is False


def test_naive_values_are_read_as_utc():
    # SQLite hands timestamps back without an offset
    subscription = make_subscription(current_period_end=(NOW + timedelta(minutes=5)).replace(tzinfo=None))

    assert is_subscription_valid(subscription, NOW) is True
    assert is_subscription_valid(subscription, NOW + timedelta(minutes=10)) is False
