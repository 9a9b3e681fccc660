"""
Normalizzazione date.

Nel database le date arrivano in formati diversi:
  - datetime / date Python (anche pandas.Timestamp)
  - stringhe ISO 8601 ("2024-03-10" oppure "2024-03-10T14:00:00.000Z")
  - stringhe locali "10/03/2024" o "10-03-2024" (giorno/mese/anno)
  - epoch in millisecondi (int/float)
  - Timestamp Firestore: oggetti con to_datetime()/ToDatetime()/toDate()
    oppure dict esportati {"_seconds": ..., "_nanoseconds": ...}

Tutto viene convertito in datetime naive in ora locale.
Input non interpretabile → None, mai eccezioni.
"""

import logging
import math
import numbers
import re
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from typing import Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import DateRangeFilter

logger = logging.getLogger(__name__)

BOUNDARY_START = "start"
BOUNDARY_END = "end"

PRESETS = ("today", "yesterday", "thisWeek", "lastWeek", "thisMonth", "lastMonth", "thisYear")

# Metodi senza argomenti esposti dai wrapper timestamp (Firestore, protobuf, JS export)
_TIMESTAMP_ACCESSORS = ("to_datetime", "ToDatetime", "toDate")

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DMY_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")

# Formati testuali non ambigui; "10/03/2024" NON è qui: va al pattern giorno/mese
_TEXT_FORMATS = ("%b %d, %Y", "%B %d, %Y", "%d %b %Y", "%d %B %Y", "%Y/%m/%d")

_EMPTY_STRINGS = ("", "-", "nan", "nat", "none", "null")


def _to_local_naive(dt: datetime) -> datetime:
    if dt.tzinfo is not None:
        return dt.astimezone().replace(tzinfo=None)
    return dt


def _from_epoch_millis(value) -> Optional[datetime]:
    if isinstance(value, float) and math.isnan(value):
        return None
    try:
        return datetime.fromtimestamp(float(value) / 1000)
    except (OverflowError, OSError, ValueError):
        return None


def _from_mapping(value: Mapping) -> Optional[datetime]:
    """Timestamp serializzato: {"_seconds", "_nanoseconds"} o {"seconds", "nanos"}."""
    seconds = value.get("_seconds", value.get("seconds"))
    if seconds is None:
        return None
    nanos = value.get("_nanoseconds", value.get("nanos")) or 0
    try:
        return datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _parse_string(s: str) -> Optional[datetime]:
    s = s.strip()
    if s.lower() in _EMPTY_STRINGS:
        return None

    # Solo data "YYYY-MM-DD" → mezzanotte locale
    if _ISO_DATE_RE.match(s):
        try:
            return datetime.strptime(s, "%Y-%m-%d")
        except ValueError:
            return None

    # ISO completo, anche con suffisso Z
    iso = s[:-1] + "+00:00" if s[-1] in "Zz" else s
    try:
        return _to_local_naive(datetime.fromisoformat(iso))
    except ValueError:
        pass

    for fmt in _TEXT_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue

    m = _DMY_RE.match(s)
    if m:
        day, month, year = (int(g) for g in m.groups())
        try:
            return datetime(year, month, day)
        except ValueError:
            return None

    return None


def parse_date(value) -> Optional[datetime]:
    """
    Converte un valore data eterogeneo in datetime naive locale.

    Ordine: oggetto data valido → accessor timestamp → parsing stringa
    generico → pattern dd/mm/yyyy → None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value != value:  # NaT
            return None
        return _to_local_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)

    for accessor in _TIMESTAMP_ACCESSORS:
        method = getattr(value, accessor, None)
        if callable(method):
            try:
                converted = method()
            except Exception as e:
                logger.debug("Conversione timestamp fallita per %r: %s", value, e)
                return None
            return parse_date(converted) if isinstance(converted, date) else None

    if isinstance(value, Mapping):
        return _from_mapping(value)

    if isinstance(value, str):
        parsed = _parse_string(value)
        if parsed is None and value.strip().lower() not in _EMPTY_STRINGS:
            logger.debug("Data non interpretabile: %r", value)
        return parsed

    if isinstance(value, numbers.Real):
        return _from_epoch_millis(value)

    logger.debug("Tipo data non supportato: %r", value)
    return None


def resolve_now(now=None) -> datetime:
    """Istante di riferimento come datetime naive locale; None o non valido → adesso."""
    parsed = parse_date(now) if now is not None else None
    return parsed or datetime.now()


def normalize(value, boundary: str = BOUNDARY_START) -> Optional[datetime]:
    """
    Data canonica per confronti inclusivi:
      boundary="start" → 00:00:00.000
      boundary="end"   → 23:59:59.999999
    """
    if boundary not in (BOUNDARY_START, BOUNDARY_END):
        raise ValueError(f"Boundary non valido: {boundary!r}")

    parsed = parse_date(value)
    if parsed is None:
        return None
    if boundary == BOUNDARY_END:
        return parsed.replace(hour=23, minute=59, second=59, microsecond=999999)
    return parsed.replace(hour=0, minute=0, second=0, microsecond=0)


def format_date(value) -> str:
    """Data per i report: 'Mar 10, 2024' oppure 'N/A'."""
    d = parse_date(value)
    if d is None:
        return "N/A"
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def format_datetime(value) -> str:
    """Data e ora: 'March 10, 2024 3:05 PM' oppure 'N/A'."""
    d = parse_date(value)
    if d is None:
        return "N/A"
    hour = d.hour % 12 or 12
    suffix = "AM" if d.hour < 12 else "PM"
    return f"{d.strftime('%B')} {d.day}, {d.year} {hour}:{d.minute:02d} {suffix}"


def calculate_nights(check_in, check_out) -> int:
    ci = parse_date(check_in)
    co = parse_date(check_out)
    if ci is None or co is None:
        return 0
    return math.ceil((co - ci).total_seconds() / 86400)


def to_iso_date(value) -> Optional[str]:
    d = parse_date(value)
    return d.strftime("%Y-%m-%d") if d else None


def preset_range(name: str, today: Optional[date] = None) -> DateRangeFilter:
    """
    Intervalli predefiniti del selettore report.
    La settimana inizia di domenica.
    """
    if today is None:
        today = date.today()
    elif isinstance(today, datetime):
        today = today.date()

    since_sunday = (today.weekday() + 1) % 7

    if name == "today":
        start, end = today, today
    elif name == "yesterday":
        start = end = today - timedelta(days=1)
    elif name == "thisWeek":
        start, end = today - timedelta(days=since_sunday), today
    elif name == "lastWeek":
        start = today - timedelta(days=since_sunday + 7)
        end = start + timedelta(days=6)
    elif name == "thisMonth":
        start, end = today.replace(day=1), today
    elif name == "lastMonth":
        end = today.replace(day=1) - timedelta(days=1)
        start = end.replace(day=1)
    elif name == "thisYear":
        start, end = today.replace(month=1, day=1), today
    else:
        raise ValueError(f"Preset sconosciuto: {name!r}. Validi: {', '.join(PRESETS)}")

    return DateRangeFilter(start=start, end=end, enabled=True)
