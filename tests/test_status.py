from datetime import datetime, timezone

import pytest

from core.status import (
    BOOKING_CANCELLED,
    BOOKING_COMPLETED,
    BOOKING_UPCOMING,
    PAYMENT_CANCELLED,
    PAYMENT_COMPLETED,
    PAYMENT_PENDING,
    booking_status,
    is_paid,
    matches_status_filter,
    payment_status,
)

NOW = datetime(2024, 6, 1, 12, 0)
PAST = "2024-05-01"
FUTURE = "2024-07-01"


@pytest.mark.parametrize("status", ["cancelled", "refunded"])
def test_terminal_status_wins_over_payment(make_booking, status):
    b = make_booking(status=status, payment_status="completed", paid_amount=1000, check_in=PAST)
    assert payment_status(b, NOW) == PAYMENT_CANCELLED
    assert booking_status(b, NOW) == BOOKING_CANCELLED


def test_future_check_in_is_always_pending(make_booking):
    b = make_booking(status="confirmed", payment_status="completed", paid_amount=1000, check_in=FUTURE)
    assert payment_status(b, NOW) == PAYMENT_PENDING
    assert booking_status(b, NOW) == BOOKING_UPCOMING


def test_past_check_in_with_completed_payment(make_booking):
    b = make_booking(status="confirmed", payment_status="completed", check_in=PAST)
    assert payment_status(b, NOW) == PAYMENT_COMPLETED
    assert booking_status(b, NOW) == BOOKING_COMPLETED


def test_paid_amount_presence_counts_even_when_zero(make_booking):
    b = make_booking(status="confirmed", paid_amount=0.0, check_in=PAST)
    assert is_paid(b)
    assert payment_status(b, NOW) == PAYMENT_COMPLETED


def test_past_check_in_without_payment_is_upcoming(make_booking):
    b = make_booking(status="confirmed", total=1000, check_in=PAST)
    assert payment_status(b, NOW) == PAYMENT_PENDING
    assert booking_status(b, NOW) == BOOKING_UPCOMING


def test_no_dates_relies_on_payment(make_booking):
    paid = make_booking(status="confirmed", payment_status="completed")
    unpaid = make_booking(status="pending")
    assert booking_status(paid, NOW) == BOOKING_COMPLETED
    assert booking_status(unpaid, NOW) == BOOKING_UPCOMING


def test_unparseable_check_in_is_treated_as_absent(make_booking):
    b = make_booking(status="confirmed", paid_amount=500, check_in="sometime soon")
    assert payment_status(b, NOW) == PAYMENT_COMPLETED
    assert booking_status(b, NOW) == BOOKING_COMPLETED


def test_check_in_as_epoch_millis(make_booking):
    future_ms = int(datetime(2024, 7, 1).timestamp() * 1000)
    b = make_booking(status="confirmed", paid_amount=500, check_in=future_ms)
    assert booking_status(b, NOW) == BOOKING_UPCOMING


def test_status_filter(make_booking):
    upcoming = make_booking(status="confirmed", check_in=FUTURE)
    completed = make_booking(status="completed", paid_amount=800, check_in=PAST)
    cancelled = make_booking(status="cancelled", check_in=PAST)
    unpaid_past = make_booking(status="confirmed", check_in=PAST)
    bookings = [upcoming, completed, cancelled, unpaid_past]

    def pick(flt):
        return [b for b in bookings if matches_status_filter(b, flt, NOW)]

    assert pick("all") == bookings
    assert pick("") == bookings
    assert pick("upcoming") == [upcoming, unpaid_past]
    assert pick("completed") == [completed]
    assert pick("cancelled") == [cancelled]


def test_upcoming_filter_excludes_completed_payment(make_booking):
    paid_past = make_booking(status="confirmed", payment_status="completed", check_in=PAST)
    assert not matches_status_filter(paid_past, "upcoming", NOW)


def test_aware_now_is_accepted(make_booking):
    aware = datetime(2024, 6, 1, 12, tzinfo=timezone.utc)
    future = make_booking(status="confirmed", paid_amount=100, check_in=FUTURE)
    past = make_booking(status="confirmed", paid_amount=100, check_in=PAST)
    assert payment_status(future, aware) == PAYMENT_PENDING
    assert booking_status(future, aware) == BOOKING_UPCOMING
    assert booking_status(past, aware) == BOOKING_COMPLETED
    assert matches_status_filter(future, "upcoming", aware)


@pytest.mark.parametrize("paid, expected", [(True, BOOKING_COMPLETED), (False, BOOKING_UPCOMING)])
def test_check_out_without_check_in_follows_payment(make_booking, paid, expected):
    b = make_booking(status="confirmed", check_out=FUTURE, paid_amount=100 if paid else None)
    assert booking_status(b, NOW) == expected
    assert payment_status(b, NOW) == (PAYMENT_COMPLETED if paid else PAYMENT_PENDING)
