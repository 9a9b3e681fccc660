"""
Saldo admin ricalcolato da zero: commissioni del ledger meno i payout eseguiti.

Il saldo salvato nelle impostazioni resta solo come fallback/confronto.
"""

import logging
from typing import Iterable, Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import PAYPAL_DONE_STATUSES, SETTLED_PAYOUT_STATUSES
from core.models import Payout, Transaction

logger = logging.getLogger(__name__)


def total_admin_fees(transactions: Iterable[Transaction]) -> float:
    return round(sum(t.admin_fee for t in transactions), 2)


def total_payouts(payouts: Optional[Iterable[Payout]]) -> float:
    """Somma dei payout completati; collezione assente = nessun payout."""
    if not payouts:
        return 0.0
    return round(sum(p.amount for p in payouts if p.status in SETTLED_PAYOUT_STATUSES), 2)


def reconcile(transactions: Iterable[Transaction], payouts: Optional[Iterable[Payout]] = None) -> float:
    """Saldo = commissioni - payout, mai negativo."""
    fees = total_admin_fees(transactions)
    paid_out = total_payouts(payouts)
    balance = max(0.0, round(fees - paid_out, 2))
    logger.info("Saldo admin: commissioni %.2f - payout %.2f = %.2f", fees, paid_out, balance)
    return balance


def validate_cashout(balance: float, amount: float) -> None:
    if amount is None or amount <= 0:
        raise ValueError("Importo prelievo non valido: deve essere maggiore di zero")
    if amount > balance:
        raise ValueError(f"Importo prelievo {amount:.2f} superiore al saldo disponibile {balance:.2f}")


def remaining_after_cashout(balance: float, amount: float) -> float:
    return max(0.0, round(balance - amount, 2))


def payout_status_from_paypal(paypal_status: Optional[str]) -> str:
    """Stato PayPal del batch → stato del payout salvato."""
    if paypal_status and paypal_status.upper() in PAYPAL_DONE_STATUSES:
        return "completed"
    return "processing"
