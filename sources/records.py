"""
Conversione record (dict campo → valore) nei modelli.

I record arrivano dal Google Sheet o da un export CSV della collezione;
i nomi campo sono quelli dei documenti (camelCase). Una cella vuota vale
come campo assente: paidAmount vuoto ≠ paidAmount 0.
"""

import re
from datetime import datetime
from typing import Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import Booking, Payout, UserProfile

_TRUE_VALUES = ("true", "1", "yes", "si", "sì", "x")

# Tutto tranne cifre, separatori e segno (simbolo valuta, "PHP", spazi)
_AMOUNT_NOISE_RE = re.compile(r"[^0-9,.\-]")
_DECIMAL_COMMA_RE = re.compile(r"^-?\d+,\d{2}$")


def cell(row: dict, key: str):
    """Valore del campo; vuoto → None."""
    val = row.get(key)
    if val is None:
        return None
    if isinstance(val, float) and val != val:  # NaN da pandas
        return None
    if isinstance(val, str) and val.strip() == "":
        return None
    return val


def to_float(val) -> Optional[float]:
    """
    Importo numerico in formato inglese: "₱1,500.00" → 1500.0.
    La virgola è separatore delle migliaia; vale come decimale solo se è
    l'unico separatore ed è seguita da esattamente due cifre ("12,50").
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        return float(val)
    s = _AMOUNT_NOISE_RE.sub("", str(val))
    if _DECIMAL_COMMA_RE.match(s):
        s = s.replace(",", ".")
    else:
        s = s.replace(",", "")
    try:
        return float(s)
    except ValueError:
        return None


def to_bool(val) -> bool:
    if isinstance(val, bool):
        return val
    if val is None:
        return False
    return str(val).strip().lower() in _TRUE_VALUES


def to_str(val) -> str:
    return "" if val is None else str(val).strip()


def _epoch_or_raw(val):
    """Epoch in millisecondi letto come testo ("1710028800000") → int."""
    if isinstance(val, str) and val.strip().isdigit() and len(val.strip()) >= 11:
        return int(val.strip())
    return val


def row_to_booking(row: dict) -> Booking:
    return Booking(
        id=to_str(cell(row, "id")),
        guest_id=to_str(cell(row, "guestId")),
        host_id=to_str(cell(row, "hostId")),
        listing_id=to_str(cell(row, "listingId")),
        listing_title=to_str(cell(row, "listingTitle")),
        check_in=_epoch_or_raw(cell(row, "checkIn")),
        check_out=_epoch_or_raw(cell(row, "checkOut")),
        status=to_str(cell(row, "status")).lower() or None,
        payment_status=to_str(cell(row, "paymentStatus")).lower() or None,
        paid_amount=to_float(cell(row, "paidAmount")),
        total=to_float(cell(row, "total")),
        total_amount=to_float(cell(row, "totalAmount")),
        created_at=_epoch_or_raw(cell(row, "createdAt")),
        updated_at=_epoch_or_raw(cell(row, "updatedAt")),
        paid_at=_epoch_or_raw(cell(row, "paidAt")),
        payout_processed=to_bool(cell(row, "payoutProcessed")),
        guest_name=to_str(cell(row, "guestName")),
        guest_email=to_str(cell(row, "guestEmail")),
        host_name=to_str(cell(row, "hostName")),
        payment_method=to_str(cell(row, "paymentMethod")),
    )


def row_to_payout(row: dict) -> Payout:
    """Importo mancante → 0; stato in minuscolo."""
    return Payout(
        id=to_str(cell(row, "id")),
        amount=to_float(cell(row, "amount")) or 0.0,
        status=to_str(cell(row, "status")).lower(),
        currency=to_str(cell(row, "currency")) or "PHP",
        payment_method=to_str(cell(row, "paymentMethod")) or "paypal",
        paypal_email=to_str(cell(row, "paypalEmail")),
        payout_batch_id=to_str(cell(row, "payoutBatchId")),
        transaction_id=to_str(cell(row, "transactionId")),
        remaining_balance=to_float(cell(row, "remainingBalance")),
        description=to_str(cell(row, "description")),
        created_at=_epoch_or_raw(cell(row, "createdAt")),
    )


def row_to_profile(row: dict) -> UserProfile:
    return UserProfile(
        id=to_str(cell(row, "id")),
        first_name=to_str(cell(row, "firstName")),
        last_name=to_str(cell(row, "lastName")),
        display_name=to_str(cell(row, "displayName")),
        name=to_str(cell(row, "name")),
        email=to_str(cell(row, "email")),
    )


def payout_to_row(p: Payout) -> list:
    """Payout → valori nell'ordine di PAYOUT_COLUMNS."""
    created = p.created_at if p.created_at is not None else datetime.now()
    if isinstance(created, datetime):
        created = created.strftime("%Y-%m-%dT%H:%M:%S")
    return [
        p.id,                                    # id
        round(p.amount, 2),                      # amount
        p.currency,                              # currency
        p.status,                                # status
        p.payment_method,                        # paymentMethod
        p.paypal_email,                          # paypalEmail
        p.payout_batch_id,                       # payoutBatchId
        p.transaction_id,                        # transactionId
        round(p.remaining_balance, 2) if p.remaining_balance is not None else "",  # remainingBalance
        p.description,                           # description
        created,                                 # createdAt
    ]
