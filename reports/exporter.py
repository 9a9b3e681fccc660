"""
Report esportabili dal pannello admin.

Un report è: titolo, colonne ordinate (chiave, etichetta, larghezza relativa)
e righe semplici (solo stringhe/numeri). Da qui si generano:
  - DataFrame per st.dataframe
  - CSV e XLSX per il download (larghezze colonne proporzionali)
  - pagina HTML stampabile
"""

import html
import io
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

import pandas as pd
from openpyxl.utils import get_column_letter

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    CURRENCY_SYMBOL,
    HOSTS_REPORT_COLUMNS,
    RECENT_BOOKINGS_REPORT_COLUMNS,
    REPORT_BRAND,
    RESERVATION_REPORT_COLUMNS,
    TRANSACTION_REPORT_COLUMNS,
)
from core.dates import format_date, format_datetime
from core.models import Booking, DateRangeFilter, RankedUser, Transaction
from core.ranges import filter_bookings
from core.status import matches_status_filter, payment_status

# Larghezza totale (caratteri Excel) distribuita tra le colonne
_EXCEL_TOTAL_WIDTH = 120


@dataclass
class ReportColumn:
    key: str
    label: str
    width: float = 1.0


@dataclass
class Report:
    title: str
    columns: List[ReportColumn]
    rows: List[dict]
    meta: dict = field(default_factory=dict)


def _columns(descriptors) -> List[ReportColumn]:
    return [ReportColumn(key, label, width) for key, label, width in descriptors]


def format_money(amount) -> str:
    return f"{CURRENCY_SYMBOL}{float(amount or 0):,.2f}"


def capitalize_status(status: Optional[str]) -> str:
    if not status or status == "N/A":
        return "N/A"
    return status[:1].upper() + status[1:].lower()


def status_filter_label(status_filter: str) -> str:
    labels = {
        "all": "All Reservations",
        "upcoming": "Upcoming Reservations (with Pending Payment)",
        "completed": "Completed Reservations",
        "cancelled": "Cancelled Reservations",
    }
    if not status_filter:
        return labels["all"]
    return labels.get(status_filter, f"{capitalize_status(status_filter)} Reservations")


# ── Report pronti ────────────────────────────────────────────────────────────

def reservations_report(
    bookings: Iterable[Booking],
    status_filter: str = "all",
    now: Optional[datetime] = None,
) -> Report:
    if now is None:
        now = datetime.now()
    selected = [b for b in bookings if matches_status_filter(b, status_filter, now)]
    label = status_filter_label(status_filter)

    rows = []
    for b in selected:
        guest = b.guest_name or "Guest"
        if b.guest_email:
            guest = f"{guest}\n{b.guest_email}"
        rows.append({
            "bookingId": b.id[:8] if b.id else "N/A",
            "guestName": guest,
            "listingTitle": b.listing_title or "Unknown",
            "checkIn": format_date(b.check_in),
            "checkOut": format_date(b.check_out),
            "status": capitalize_status(b.status),
            "paymentStatus": capitalize_status(payment_status(b, now)),
            "createdAt": format_date(b.created_at),
        })

    return Report(
        title=label,
        columns=_columns(RESERVATION_REPORT_COLUMNS),
        rows=rows,
        meta={"generatedBy": "Admin Dashboard", "filter": label, "totalRecords": len(rows)},
    )


def transactions_report(
    transactions: Iterable[Transaction],
    date_from=None,
    date_to=None,
) -> Report:
    transactions = list(transactions)
    rows = [
        {
            "date": format_date(t.date),
            "bookingId": t.booking_id[:8] if t.booking_id else "N/A",
            "guest": t.guest_name,
            "host": t.host_name,
            "subtotal": format_money(t.subtotal),
            "adminFee": format_money(t.admin_fee),
            "hostPayout": format_money(t.host_payout),
            "status": capitalize_status(t.status),
        }
        for t in transactions
    ]
    return Report(
        title="Service Fees Report",
        columns=_columns(TRANSACTION_REPORT_COLUMNS),
        rows=rows,
        meta={
            "generatedBy": "Admin Dashboard",
            "dateFrom": date_from,
            "dateTo": date_to,
            "totalRecords": len(rows),
            "totalAdminFees": format_money(round(sum(t.admin_fee for t in transactions), 2)),
        },
    )


def recent_bookings_report(bookings: Iterable[Booking], flt: Optional[DateRangeFilter] = None) -> Report:
    """Prenotazioni filtrate per data di creazione."""
    selected = filter_bookings(bookings, flt, start_field="created_at", end_field=None)
    rows = [
        {
            "date": format_date(b.created_at),
            "status": b.status or "N/A",
            "total": format_money(b.total),
            "listingTitle": b.listing_title or "Unknown",
        }
        for b in selected
    ]
    meta = {"generatedBy": "Admin Dashboard", "totalRecords": len(rows)}
    if flt is not None and flt.enabled:
        meta["dateFrom"] = flt.start
        meta["dateTo"] = flt.end
    return Report(
        title="Recent Bookings Report",
        columns=_columns(RECENT_BOOKINGS_REPORT_COLUMNS),
        rows=rows,
        meta=meta,
    )


def hosts_report(ranked_hosts: Iterable[RankedUser]) -> Report:
    rows = [
        {
            "ranking": h.ranking,
            "name": h.name,
            "email": h.email,
            "totalBookings": h.total_bookings,
            "totalEarnings": format_money(h.total_earnings),
        }
        for h in ranked_hosts
    ]
    return Report(
        title="Host Rankings Report",
        columns=_columns(HOSTS_REPORT_COLUMNS),
        rows=rows,
        meta={"generatedBy": "Admin Dashboard", "totalRecords": len(rows)},
    )


# ── Rendering ────────────────────────────────────────────────────────────────

def report_to_dataframe(report: Report) -> pd.DataFrame:
    """Colonne nell'ordine del report, intestate con le etichette."""
    keys = [c.key for c in report.columns]
    df = pd.DataFrame(report.rows, columns=keys)
    return df.rename(columns={c.key: c.label for c in report.columns})


def _date_range_text(meta: dict) -> Optional[str]:
    if not meta.get("dateFrom") and not meta.get("dateTo"):
        return None
    start = format_date(meta["dateFrom"]) if meta.get("dateFrom") else "All time"
    end = format_date(meta["dateTo"]) if meta.get("dateTo") else "Present"
    return f"{start} - {end}"


def _meta_lines(report: Report, now: datetime) -> List[tuple]:
    lines = []
    date_range = _date_range_text(report.meta)
    if date_range:
        lines.append(("Date Range", date_range))
    lines.append(("Generated", format_datetime(now)))
    for key, label in (("generatedBy", "Generated by"), ("totalRecords", "Total Records"),
                       ("filter", "Filter"), ("totalAdminFees", "Total Admin Fees")):
        if report.meta.get(key) is not None:
            lines.append((label, str(report.meta[key])))
    return lines


def to_csv_bytes(report: Report) -> bytes:
    return report_to_dataframe(report).to_csv(index=False).encode("utf-8")


def to_excel_bytes(report: Report, now: Optional[datetime] = None) -> bytes:
    """
    XLSX con foglio "Report" (dati) e foglio "Info" (titolo e metadati).
    Larghezze colonne proporzionali alle larghezze relative del report.
    """
    if now is None:
        now = datetime.now()
    df = report_to_dataframe(report)
    info = pd.DataFrame([("Title", report.title)] + _meta_lines(report, now), columns=["Field", "Value"])

    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Report")
        info.to_excel(writer, index=False, sheet_name="Info")

        ws = writer.sheets["Report"]
        total_width = sum(c.width for c in report.columns) or 1
        for idx, col in enumerate(report.columns, start=1):
            width = col.width / total_width * _EXCEL_TOTAL_WIDTH
            ws.column_dimensions[get_column_letter(idx)].width = max(8, round(width, 1))
        ws.freeze_panes = "A2"
    return buf.getvalue()


def to_html(report: Report, now: Optional[datetime] = None) -> str:
    """Pagina HTML A4 pronta per la stampa dal browser."""
    if now is None:
        now = datetime.now()

    if report.rows:
        table = report_to_dataframe(report).to_html(index=False, border=0, classes="report-table")
    else:
        table = '<p class="empty">No data available</p>'

    meta_html = "\n".join(
        f'<div class="meta-item"><span class="meta-label">{html.escape(label)}:</span> '
        f"<span>{html.escape(value)}</span></div>"
        for label, value in _meta_lines(report, now)
    )
    title = html.escape(report.title)
    brand = html.escape(REPORT_BRAND)

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>{title} - {brand}</title>
<style>
  @media print {{ @page {{ margin: 1.5cm 1cm; size: A4; }} }}
  body {{ font-family: Arial, sans-serif; color: #111827; padding: 30px 20px; }}
  .header {{ border: 2px solid #10b981; border-radius: 12px; padding: 20px; background: #f0fdf4; }}
  .report-title {{ font-size: 20px; font-weight: 700; }}
  .meta {{ margin-top: 12px; font-size: 12px; color: #4b5563; }}
  .meta-label {{ font-weight: 600; }}
  table.report-table {{ width: 100%; border-collapse: collapse; margin-top: 25px; font-size: 12px; }}
  table.report-table th {{ background: #10b981; color: #fff; text-align: left; padding: 10px; }}
  table.report-table td {{ border-bottom: 1px solid #e5e7eb; padding: 8px 10px; white-space: pre-line; }}
  .footer {{ margin-top: 30px; font-size: 10px; color: #6b7280; display: flex; justify-content: space-between; }}
</style>
</head>
<body>
<div class="header">
  <div class="report-title">{title}</div>
  <div class="meta">
{meta_html}
  </div>
</div>
<div class="content">
{table}
</div>
<div class="footer"><span>{brand}</span><span>Generated on {html.escape(format_date(now))}</span></div>
</body>
</html>
"""


def report_filename(title: str, ext: str, now: Optional[datetime] = None) -> str:
    """'Service Fees Report' → 'service-fees-report-1710028800000.pdf'."""
    if now is None:
        now = datetime.now()
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return f"{slug}-{int(now.timestamp() * 1000)}.{ext}"
