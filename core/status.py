"""
Stato derivato di una prenotazione e del suo pagamento.

Regole, in ordine di priorità:
  1. status cancelled/refunded → tutto "cancelled" (terminale)
  2. pagamento "completed" se paymentStatus == completed o paidAmount presente
  3. check-in nel futuro → pagamento "pending", prenotazione "upcoming"
  4. altrimenti prenotazione "completed" se pagata, "upcoming" se no

Date non interpretabili valgono come assenti (nessun errore).
"""

from datetime import datetime
from typing import Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import TERMINAL_STATUSES
from core.dates import parse_date, resolve_now
from core.models import Booking

PAYMENT_COMPLETED = "completed"
PAYMENT_PENDING = "pending"
PAYMENT_CANCELLED = "cancelled"

BOOKING_COMPLETED = "completed"
BOOKING_UPCOMING = "upcoming"
BOOKING_CANCELLED = "cancelled"


def is_terminal(booking: Booking) -> bool:
    return booking.status in TERMINAL_STATUSES


def is_paid(booking: Booking) -> bool:
    """Conta la presenza di paidAmount, non il valore: 0 = pagato."""
    return booking.payment_status == "completed" or booking.paid_amount is not None


def _check_in_is_future(booking: Booking, now: datetime) -> bool:
    check_in = parse_date(booking.check_in)
    return check_in is not None and check_in > now


def payment_status(booking: Booking, now: Optional[datetime] = None) -> str:
    now = resolve_now(now)

    if is_terminal(booking):
        return PAYMENT_CANCELLED
    # Una prenotazione futura non può risultare già pagata
    if _check_in_is_future(booking, now):
        return PAYMENT_PENDING
    return PAYMENT_COMPLETED if is_paid(booking) else PAYMENT_PENDING


def booking_status(booking: Booking, now: Optional[datetime] = None) -> str:
    now = resolve_now(now)

    if is_terminal(booking):
        return BOOKING_CANCELLED
    if _check_in_is_future(booking, now):
        return BOOKING_UPCOMING
    # Servizi/esperienze senza date: decide solo il pagamento
    if payment_status(booking, now) == PAYMENT_COMPLETED:
        return BOOKING_COMPLETED
    return BOOKING_UPCOMING


def matches_status_filter(booking: Booking, status_filter: str, now: Optional[datetime] = None) -> bool:
    """
    Filtro della lista prenotazioni.
    "upcoming" esclude le prenotazioni già pagate.
    """
    if not status_filter or status_filter == "all":
        return True
    now = resolve_now(now)

    status = booking_status(booking, now)
    if status_filter == BOOKING_UPCOMING:
        return status == BOOKING_UPCOMING and payment_status(booking, now) != PAYMENT_COMPLETED
    return status == status_filter
