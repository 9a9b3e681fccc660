import pytest

from core.models import Booking, Payout, UserProfile


@pytest.fixture
def make_booking():
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        fields.setdefault("id", f"booking{counter['n']:04d}")
        return Booking(**fields)

    return _make


@pytest.fixture
def make_payout():
    def _make(amount, status="completed", **fields):
        fields.setdefault("id", f"payout-{amount}")
        return Payout(amount=amount, status=status, **fields)

    return _make


@pytest.fixture
def hosts():
    return [
        UserProfile(id="h1", first_name="Maria", last_name="Santos", email="maria@example.com"),
        UserProfile(id="h2", display_name="Beach House Co", email="beach@example.com"),
        UserProfile(id="h3", email="quiet.host@example.com"),
    ]


@pytest.fixture
def guests():
    return [
        UserProfile(id="g1", first_name="Ana", last_name="Cruz", email="ana@example.com"),
        UserProfile(id="g2", name="Ben", email="ben@example.com"),
    ]
