"""
Ledger commissioni: una transazione per ogni prenotazione pagata.

Il ledger non è salvato da nessuna parte: viene ricostruito ogni volta
dall'intera collezione prenotazioni (non dalla vista filtrata della UI).

Prenotazione idonea se:
  - status non cancelled/refunded
  - pagamento ricevuto: paymentStatus == completed, oppure paidAmount presente,
    oppure totale > 0 con status confirmed/completed o payout già eseguito
  - subtotale (paidAmount, altrimenti total; mai totalAmount) > 0
"""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    DEFAULT_FEE_PERCENTAGE,
    PAID_IMPLYING_STATUSES,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_CONFIRMED,
)
from core.dates import parse_date, resolve_now
from core.models import Booking, DateRangeFilter, RankedUser, Transaction, UserProfile, display_name
from core.ranges import matches
from core.status import is_paid, is_terminal

logger = logging.getLogger(__name__)

TRANSACTION_COMPLETED = "completed"
TRANSACTION_PENDING = "pending"

_CENT = Decimal("0.01")


def _to_float(val) -> float:
    """Importo numerico; None e valori non validi → 0.0."""
    if val is None or str(val).strip() in ("", "nan", "-"):
        return 0.0
    try:
        return float(val)
    except (ValueError, TypeError):
        return 0.0


def _fee_or_default(fee_percentage) -> float:
    pct = _to_float(fee_percentage)
    return pct if pct else DEFAULT_FEE_PERCENTAGE


def nominal_total(booking: Booking) -> float:
    """Prezzo nominale: total, altrimenti totalAmount (solo guadagni host)."""
    return _to_float(booking.total) or _to_float(booking.total_amount)


def resolve_subtotal(booking: Booking) -> float:
    """Importo lordo: paidAmount se diverso da zero, altrimenti total. totalAmount non conta."""
    return _to_float(booking.paid_amount) or _to_float(booking.total)


def is_payment_received(booking: Booking) -> bool:
    # Confermata con totale positivo conta come pagata anche senza segnale esplicito
    if is_paid(booking):
        return True
    return _to_float(booking.total) > 0 and (
        booking.status in PAID_IMPLYING_STATUSES or bool(booking.payout_processed)
    )


def is_eligible(booking: Booking) -> bool:
    if is_terminal(booking):
        return False
    if not is_payment_received(booking):
        return False
    return resolve_subtotal(booking) > 0


def round_money(amount: float) -> float:
    """Arrotonda al centesimo, metà per eccesso (0.125 → 0.13)."""
    return float(Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def split_amount(subtotal: float, fee_percentage: float) -> tuple[float, float]:
    """(admin_fee, host_payout) arrotondati al centesimo; payout = subtotale - fee arrotondata."""
    admin_fee = round_money(subtotal * fee_percentage / 100)
    host_payout = round_money(subtotal - admin_fee)
    return admin_fee, host_payout


def transaction_status(booking: Booking) -> str:
    if booking.payout_processed or booking.status == STATUS_COMPLETED:
        return TRANSACTION_COMPLETED
    return TRANSACTION_PENDING


def build_ledger(
    bookings: Iterable[Booking],
    fee_percentage: Optional[float] = None,
    now: Optional[datetime] = None,
    guest_names: Optional[Dict[str, str]] = None,
    host_names: Optional[Dict[str, str]] = None,
) -> List[Transaction]:
    """
    Ricostruisce il ledger dalle prenotazioni, ordinato per data decrescente.
    """
    pct = _fee_or_default(fee_percentage)
    now = resolve_now(now)
    guest_names = guest_names or {}
    host_names = host_names or {}

    transactions = []
    scanned = 0
    for b in bookings:
        scanned += 1
        if not is_eligible(b):
            continue

        subtotal = resolve_subtotal(b)
        admin_fee, host_payout = split_amount(subtotal, pct)

        # Data pagamento, poi ultimo aggiornamento, poi creazione
        tx_date = (
            parse_date(b.paid_at)
            or parse_date(b.updated_at)
            or parse_date(b.created_at)
            or now
        )

        transactions.append(Transaction(
            id=f"booking-{b.id}",
            booking_id=b.id,
            date=tx_date,
            subtotal=subtotal,
            admin_fee=admin_fee,
            host_payout=host_payout,
            status=transaction_status(b),
            guest_id=b.guest_id,
            guest_name=b.guest_name or guest_names.get(b.guest_id) or "Guest",
            host_id=b.host_id,
            host_name=b.host_name or host_names.get(b.host_id) or "Host",
            payment_method=b.payment_method or "unknown",
            payment_status=b.payment_status or "unknown",
        ))

    transactions.sort(key=lambda t: t.date, reverse=True)
    logger.info("Ledger: %d transazioni da %d prenotazioni (fee %s%%)", len(transactions), scanned, pct)
    return transactions


def filter_transactions(
    transactions: Iterable[Transaction],
    date_from=None,
    date_to=None,
    status: Optional[str] = None,
    host_id: Optional[str] = None,
) -> List[Transaction]:
    """Filtri della vista commissioni: periodo inclusivo, stato, host."""
    flt = DateRangeFilter(start=date_from, end=date_to)
    result = []
    for t in transactions:
        if not matches(t.date, None, flt):
            continue
        if status and t.status != status:
            continue
        if host_id and t.host_id != host_id:
            continue
        result.append(t)
    return result


def host_earnings(bookings: Iterable[Booking], fee_percentage: Optional[float] = None) -> Dict[str, float]:
    """
    Guadagni netti per host (totale - commissione admin).
    Contano completed/active, oppure confirmed già pagate.
    """
    pct = _fee_or_default(fee_percentage)
    earnings = defaultdict(float)
    for b in bookings:
        if not b.host_id:
            continue
        paid = is_paid(b)
        eligible = b.status in (STATUS_COMPLETED, STATUS_ACTIVE) or (b.status == STATUS_CONFIRMED and paid)
        if not (paid and eligible):
            continue
        amount = _to_float(b.paid_amount) or nominal_total(b)
        if amount > 0:
            earnings[b.host_id] += amount - amount * pct / 100
    return {host_id: round(total, 2) for host_id, total in earnings.items()}


def _count_by(bookings: Iterable[Booking], attr: str) -> Dict[str, int]:
    counts = defaultdict(int)
    for b in bookings:
        key = getattr(b, attr)
        if key:
            counts[key] += 1
    return counts


def rank_hosts(
    hosts: Iterable[UserProfile],
    bookings: List[Booking],
    fee_percentage: Optional[float] = None,
) -> List[RankedUser]:
    """Classifica host per guadagni (1 = più alto)."""
    earnings = host_earnings(bookings, fee_percentage)
    counts = _count_by(bookings, "host_id")

    ranked = [
        RankedUser(
            id=h.id,
            name=display_name(h, fallback="Host"),
            email=h.email,
            total_bookings=counts.get(h.id, 0),
            total_earnings=earnings.get(h.id, 0.0),
        )
        for h in hosts
    ]
    ranked.sort(key=lambda r: r.total_earnings, reverse=True)
    for i, r in enumerate(ranked, start=1):
        r.ranking = i
    return ranked


def rank_guests(guests: Iterable[UserProfile], bookings: List[Booking]) -> List[RankedUser]:
    """Classifica ospiti per numero di prenotazioni."""
    counts = _count_by(bookings, "guest_id")

    ranked = [
        RankedUser(
            id=g.id,
            name=display_name(g),
            email=g.email,
            total_bookings=counts.get(g.id, 0),
        )
        for g in guests
    ]
    ranked.sort(key=lambda r: r.total_bookings, reverse=True)
    for i, r in enumerate(ranked, start=1):
        r.ranking = i
    return ranked
