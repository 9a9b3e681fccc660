from datetime import date, datetime

import pytest

from core.models import DateRangeFilter
from core.ranges import filter_bookings, matches


def flt(start=None, end=None, enabled=True):
    return DateRangeFilter(start=start, end=end, enabled=enabled)


def test_disabled_or_missing_filter_matches_everything():
    assert matches("2024-03-10", "2024-03-12", None)
    assert matches("garbage", None, flt("2024-01-01", "2024-01-31", enabled=False))


def test_enabled_filter_without_bounds_matches_everything():
    assert matches("2024-03-10", "2024-03-12", flt())
    assert matches(None, None, flt())


def test_unparseable_bound_counts_as_absent():
    assert matches("2024-03-10", None, flt(start="not a date", end="also not"))
    assert matches("2024-03-10", None, flt(start="2024-03-01", end="nope"))
    assert not matches("2024-02-10", "2024-02-12", flt(start="2024-03-01", end="nope"))


def test_unparseable_candidate_is_excluded():
    assert not matches("someday", None, flt(start="2024-03-01"))
    assert not matches(None, None, flt(end="2024-03-31"))


def test_start_only_includes_ongoing_stays():
    f = flt(start="2024-03-10")
    assert matches("2024-03-10T15:00:00", None, f)
    assert matches("2024-03-08", "2024-03-11", f)
    assert matches("2024-03-08", "2024-03-10", f)
    assert not matches("2024-03-01", "2024-03-09", f)


def test_end_only_is_inclusive_to_end_of_day():
    f = flt(end="2024-03-10")
    assert matches("2024-03-10T23:59:00", None, f)
    assert matches("2024-03-01", "2024-04-01", f)
    assert not matches("2024-03-11", None, f)


def test_both_bounds_use_overlap():
    f = flt(start="2024-03-10", end="2024-03-15")
    assert matches("2024-03-12", "2024-03-13", f)  # dentro
    assert matches("2024-03-08", "2024-03-11", f)  # a cavallo dell'inizio
    assert matches("2024-03-14", "2024-03-20", f)  # a cavallo della fine
    assert matches("2024-03-01", "2024-03-31", f)  # contiene il filtro
    assert matches("2024-03-15T22:00:00", None, f)
    assert not matches("2024-03-01", "2024-03-09", f)
    assert not matches("2024-03-16", "2024-03-18", f)


def test_missing_candidate_end_uses_start():
    f = flt(start="2024-03-10", end="2024-03-15")
    assert matches("2024-03-12", "garbage", f)
    assert not matches("2024-03-09", None, f)


def test_inverted_range_matches_nothing():
    f = flt(start="2024-03-15", end="2024-03-10")
    assert not matches("2024-03-12", "2024-03-13", f)
    assert not matches("2024-03-01", "2024-03-31", f)


@pytest.mark.parametrize(
    "bound_start, bound_end",
    [
        (date(2024, 3, 10), date(2024, 3, 10)),
        ("10/03/2024", "10/03/2024"),
        (datetime(2024, 3, 10, 18, 0), datetime(2024, 3, 10, 6, 0)),
    ],
)
def test_bounds_in_any_format_cover_the_whole_day(bound_start, bound_end):
    f = flt(start=bound_start, end=bound_end)
    assert matches("2024-03-10T00:00:00", None, f)
    assert matches("2024-03-10T23:59:59", None, f)
    assert not matches("2024-03-11T00:00:00", None, f)


def test_filter_bookings_by_stay(make_booking):
    inside = make_booking(check_in="2024-03-12", check_out="2024-03-14")
    outside = make_booking(check_in="2024-04-12", check_out="2024-04-14")
    no_dates = make_booking()
    result = filter_bookings([inside, outside, no_dates], flt("2024-03-01", "2024-03-31"))
    assert result == [inside]


def test_filter_bookings_by_creation_date(make_booking):
    recent = make_booking(created_at="2024-03-20", check_in="2024-05-01", check_out="2024-05-03")
    old = make_booking(created_at="2024-01-05", check_in="2024-03-20", check_out="2024-03-22")
    result = filter_bookings(
        [recent, old], flt("2024-03-01", "2024-03-31"), start_field="created_at", end_field=None
    )
    assert result == [recent]


def test_one_day_filter_inside_stay():
    assert matches("2024-03-10", "2024-03-12", flt("2024-03-11", "2024-03-11"))


def test_touching_endpoints_overlap():
    f = flt("2024-03-10", "2024-03-15")
    assert matches("2024-03-05", "2024-03-10", f)
    assert matches("2024-03-15", "2024-03-20", f)


@pytest.mark.parametrize("f", [flt(start="2024-03-01"), flt(end="2024-03-31"), flt("2024-03-01", "2024-03-31")])
def test_unparseable_check_in_excluded_for_any_active_bound(make_booking, f):
    b = make_booking(check_in="soon", check_out="2024-03-12")
    assert filter_bookings([b], f) == []
