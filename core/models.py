"""
Modelli dati: Booking (prenotazione), Payout (prelievo admin),
Transaction (riga ledger derivata) e filtro per intervallo di date.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass
class Booking:
    """Una prenotazione come salvata nel database (solo lettura)."""
    id: str
    guest_id: str = ""
    host_id: str = ""
    listing_id: str = ""
    listing_title: str = ""
    check_in: Any = None             # date/str/epoch/timestamp: formato eterogeneo
    check_out: Any = None
    status: Optional[str] = None     # pending | pending_approval | confirmed | active | completed | cancelled | refunded
    payment_status: Optional[str] = None  # completed | pending | scheduled
    paid_amount: Optional[float] = None   # presenza = pagamento ricevuto (anche 0)
    total: Optional[float] = None
    total_amount: Optional[float] = None
    created_at: Any = None
    updated_at: Any = None
    paid_at: Any = None
    payout_processed: bool = False
    guest_name: str = ""
    guest_email: str = ""
    host_name: str = ""
    payment_method: str = ""


@dataclass
class Payout:
    """Un prelievo del saldo admin (es. verso PayPal)."""
    id: str
    amount: float
    status: str                      # completed | success | processing | ...
    currency: str = "PHP"
    payment_method: str = "paypal"
    paypal_email: str = ""
    payout_batch_id: str = ""
    transaction_id: str = ""
    remaining_balance: Optional[float] = None
    description: str = ""
    created_at: Any = None


@dataclass
class AdminSettings:
    fee_percentage: float = 5
    balance: float = 0.0             # saldo salvato: solo fallback/confronto


@dataclass
class UserProfile:
    """Ospite o host, con i campi usati per comporre il nome."""
    id: str
    first_name: str = ""
    last_name: str = ""
    display_name: str = ""
    name: str = ""
    email: str = ""


@dataclass
class Transaction:
    """Riga del ledger commissioni, ricalcolata a ogni lettura (mai salvata)."""
    id: str
    booking_id: str
    date: datetime
    subtotal: float
    admin_fee: float
    host_payout: float
    status: str                      # completed | pending
    guest_id: str = ""
    guest_name: str = "Guest"
    host_id: str = ""
    host_name: str = "Host"
    payment_method: str = "unknown"
    payment_status: str = "unknown"


@dataclass
class DateRangeFilter:
    """Filtro inclusivo per data; start/end accettano qualsiasi formato data."""
    start: Any = None
    end: Any = None
    enabled: bool = True


@dataclass
class RankedUser:
    """Host o ospite con classifica (guadagni per host, prenotazioni per ospiti)."""
    id: str
    name: str
    email: str = ""
    total_bookings: int = 0
    total_earnings: float = 0.0
    ranking: int = 0


def display_name(profile: Optional[UserProfile], fallback: str = "Guest") -> str:
    """Nome leggibile: nome+cognome, displayName, name, parte locale email."""
    if profile is None:
        return fallback
    if profile.first_name and profile.last_name:
        return f"{profile.first_name} {profile.last_name}"
    if profile.display_name:
        return profile.display_name
    if profile.name:
        return profile.name
    if profile.email:
        return profile.email.split("@")[0]
    return fallback
