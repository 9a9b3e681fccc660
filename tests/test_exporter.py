import io
from datetime import datetime

import pytest
from openpyxl import load_workbook

from core.ledger import build_ledger
from core.models import DateRangeFilter, RankedUser
from reports.exporter import (
    Report,
    capitalize_status,
    format_money,
    hosts_report,
    recent_bookings_report,
    report_filename,
    report_to_dataframe,
    reservations_report,
    status_filter_label,
    to_csv_bytes,
    to_excel_bytes,
    to_html,
    transactions_report,
)

NOW = datetime(2024, 6, 1, 12, 0)


@pytest.fixture
def bookings(make_booking):
    return [
        make_booking(
            id="abcdefghijkl",
            guest_name="Ana Cruz",
            guest_email="ana@example.com",
            listing_title="Seaside Villa",
            check_in="2024-05-01",
            check_out="2024-05-03",
            status="completed",
            paid_amount=1000.0,
            total=1000.0,
            created_at="2024-04-20",
        ),
        make_booking(
            status="confirmed",
            check_in="2024-07-01",
            check_out="2024-07-05",
            total=800.0,
            created_at="2024-05-28",
        ),
        make_booking(status="cancelled", check_in="2024-05-10", total=300.0, created_at="2024-03-02"),
    ]


def test_status_helpers():
    assert capitalize_status("pending_approval") == "Pending_approval"
    assert capitalize_status("COMPLETED") == "Completed"
    assert capitalize_status(None) == "N/A"
    assert format_money(1234.5) == "₱1,234.50"
    assert format_money(None) == "₱0.00"


@pytest.mark.parametrize("status_filter, label", [
    ("all", "All Reservations"),
    ("", "All Reservations"),
    ("upcoming", "Upcoming Reservations (with Pending Payment)"),
    ("completed", "Completed Reservations"),
    ("cancelled", "Cancelled Reservations"),
    ("refunded", "Refunded Reservations"),
])
def test_status_filter_label(status_filter, label):
    assert status_filter_label(status_filter) == label


def test_active_filter_matches_no_derived_status(bookings):
    report = reservations_report(bookings, "active", NOW)
    assert report.rows == []
    assert report.title == "Active Reservations"


def test_reservations_report_rows(bookings):
    report = reservations_report(bookings, "all", NOW)
    assert report.title == "All Reservations"
    assert report.meta["totalRecords"] == 3

    first = report.rows[0]
    assert first["bookingId"] == "abcdefgh"
    assert first["guestName"] == "Ana Cruz\nana@example.com"
    assert first["checkIn"] == "May 1, 2024"
    assert first["status"] == "Completed"
    assert first["paymentStatus"] == "Completed"

    second = report.rows[1]
    assert second["guestName"] == "Guest"
    assert second["listingTitle"] == "Unknown"
    assert second["paymentStatus"] == "Pending"
    assert report.rows[2]["paymentStatus"] == "Cancelled"


def test_reservations_report_applies_status_filter(bookings):
    report = reservations_report(bookings, "upcoming", NOW)
    assert report.title == "Upcoming Reservations (with Pending Payment)"
    assert len(report.rows) == 1
    assert report.meta["filter"] == report.title


def test_transactions_report(make_booking):
    ledger = build_ledger(
        [make_booking(id="tx-booking-1", status="completed", paid_amount=1500.0, paid_at="2024-03-10")],
        fee_percentage=10,
    )
    report = transactions_report(ledger, "2024-03-01", "2024-03-31")
    [row] = report.rows
    assert row["subtotal"] == "₱1,500.00"
    assert row["adminFee"] == "₱150.00"
    assert row["hostPayout"] == "₱1,350.00"
    assert row["status"] == "Completed"
    assert report.meta["totalAdminFees"] == "₱150.00"


def test_recent_bookings_report_filters_on_creation_date(bookings):
    report = recent_bookings_report(bookings, DateRangeFilter(start="2024-04-01", end="2024-05-31"))
    assert [r["date"] for r in report.rows] == ["Apr 20, 2024", "May 28, 2024"]
    assert report.rows[0]["total"] == "₱1,000.00"
    assert report.meta["dateFrom"] == "2024-04-01"


def test_recent_bookings_report_without_filter(bookings):
    report = recent_bookings_report(bookings)
    assert len(report.rows) == 3
    assert "dateFrom" not in report.meta


def test_hosts_report():
    report = hosts_report([RankedUser(id="h1", name="Maria", email="m@example.com", total_bookings=3,
                                      total_earnings=1900.0, ranking=1)])
    assert report.rows == [{
        "ranking": 1, "name": "Maria", "email": "m@example.com",
        "totalBookings": 3, "totalEarnings": "₱1,900.00",
    }]


def test_dataframe_uses_labels_in_column_order(bookings):
    df = report_to_dataframe(reservations_report(bookings, "all", NOW))
    assert list(df.columns) == [
        "Booking ID", "Guest", "Listing Title", "Check-in Date",
        "Check-out Date", "Status", "Payment Status", "Created At",
    ]
    assert len(df) == 3


def test_empty_report_keeps_headers():
    report = hosts_report([])
    assert list(report_to_dataframe(report).columns) == ["Rank", "Host", "Email", "Bookings", "Earnings"]
    assert to_csv_bytes(report).decode("utf-8").strip() == "Rank,Host,Email,Bookings,Earnings"


def test_csv_bytes(bookings):
    text = to_csv_bytes(recent_bookings_report(bookings)).decode("utf-8")
    lines = text.strip().splitlines()
    assert lines[0] == "Date,Status,Total,Listing"
    assert len(lines) == 4


def test_excel_bytes(bookings):
    report = reservations_report(bookings, "all", NOW)
    wb = load_workbook(io.BytesIO(to_excel_bytes(report, NOW)))
    assert wb.sheetnames == ["Report", "Info"]

    ws = wb["Report"]
    assert ws["A1"].value == "Booking ID"
    assert ws["A2"].value == "abcdefgh"
    assert ws.column_dimensions["B"].width > ws.column_dimensions["A"].width

    info = {row[0]: row[1] for row in wb["Info"].iter_rows(min_row=2, values_only=True)}
    assert info["Title"] == "All Reservations"
    assert info["Total Records"] == "3"


def test_html_page(bookings):
    page = to_html(recent_bookings_report(bookings, DateRangeFilter(start="2024-04-01")), NOW)
    assert page.startswith("<!DOCTYPE html>")
    assert "Recent Bookings Report" in page
    assert "ZENNEST Admin Dashboard" in page
    assert "Apr 1, 2024 - Present" in page
    assert "Seaside Villa" in page


def test_html_empty_report_and_escaping():
    report = Report(title="<Fees & Payouts>", columns=[], rows=[])
    page = to_html(report, NOW)
    assert "No data available" in page
    assert "&lt;Fees &amp; Payouts&gt;" in page
    assert "<Fees & Payouts>" not in page


def test_report_filename():
    millis = int(NOW.timestamp() * 1000)
    assert report_filename("Service Fees Report", "pdf", NOW) == f"service-fees-report-{millis}.pdf"
    assert report_filename("Upcoming Reservations (with Pending Payment)", "csv", NOW) == (
        f"upcoming-reservations-with-pending-payment-{millis}.csv"
    )
