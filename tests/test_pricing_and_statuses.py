from decimal import Decimal

import pytest

from tourbook.services.capacity_ledger import calculate_total_price
from tourbook.statuses import ALLOWED_TRANSITIONS, PaymentStatus, can_transition, holds_seats


def test_price_uses_adult_and_child_rates():
    assert calculate_total_price(2, 1, Decimal("50"), Decimal("20")) == Decimal("120.00")


def test_override_only_replaces_adult_rate():
    assert calculate_total_price(2, 1, Decimal("50"), Decimal("20"), Decimal("40")) == Decimal("100.00")


def test_price_is_rounded_to_cents():
    assert calculate_total_price(3, 0, Decimal("10.005"), Decimal("0")) == Decimal("30.02")


def test_zero_override_is_respected():
    assert calculate_total_price(2, 0, Decimal("50"), Decimal("20"), Decimal("0")) == Decimal("0.00")


@pytest.mark.parametrize("current,requested", [
    ("PENDING", "PAID"),
    ("PENDING", "CANCELLED"),
    ("PAID", "CANCELLED"),
    ("PAID", "REFUNDED"),
])
def test_allowed_transitions(current, requested):
    assert can_transition(current, requested)


@pytest.mark.parametrize("current,requested", [
    ("PENDING", "REFUNDED"),
    ("PAID", "PENDING"),
    ("CANCELLED", "PAID"),
    ("CANCELLED", "PENDING"),
    ("REFUNDED", "PAID"),
    ("REFUNDED", "CANCELLED"),
])
def test_rejected_transitions(current, requested):
    assert not can_transition(current, requested)


def test_every_status_has_a_row():
    assert set(ALLOWED_TRANSITIONS) == set(PaymentStatus)


def test_only_cancelled_releases_seats():
    assert [s.value for s in PaymentStatus if not holds_seats(s)] == ["CANCELLED"]
