"""
Aggregati per la dashboard admin.

Partono dalle prenotazioni e dal ledger commissioni e producono:
  - contatori della pagina principale
  - DataFrame transazioni per Streamlit (st.dataframe)
  - pivot commissioni per mese × stato e riepilogo per host
"""

import pandas as pd
from datetime import datetime
from typing import Iterable, List, Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import Booking, Transaction, UserProfile
from core.status import BOOKING_CANCELLED, BOOKING_COMPLETED, BOOKING_UPCOMING, booking_status

_TX_COLUMNS = ["data", "anno_mese", "prenotazione", "ospite", "host", "host_id",
               "subtotale", "commissione", "netto_host", "stato"]


def dashboard_stats(
    bookings: List[Booking],
    hosts: Iterable[UserProfile] = (),
    users: Iterable[UserProfile] = (),
    listings_count: int = 0,
    now: Optional[datetime] = None,
) -> dict:
    """
    Contatori della pagina principale.
    Il ricavo totale è la somma dei campi total, senza filtri di stato.
    """
    if now is None:
        now = datetime.now()

    by_status = {BOOKING_UPCOMING: 0, BOOKING_COMPLETED: 0, BOOKING_CANCELLED: 0}
    for b in bookings:
        by_status[booking_status(b, now)] += 1

    return {
        "total_bookings": len(bookings),
        "total_revenue": round(sum(b.total or 0.0 for b in bookings), 2),
        "total_hosts": len(list(hosts)),
        "total_guests": len(list(users)),
        "total_listings": listings_count,
        "upcoming": by_status[BOOKING_UPCOMING],
        "completed": by_status[BOOKING_COMPLETED],
        "cancelled": by_status[BOOKING_CANCELLED],
    }


def transactions_df(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Ledger come DataFrame, una riga per transazione."""
    rows = [
        {
            "data": t.date,
            "anno_mese": t.date.strftime("%Y-%m"),
            "prenotazione": t.booking_id,
            "ospite": t.guest_name,
            "host": t.host_name,
            "host_id": t.host_id,
            "subtotale": t.subtotal,
            "commissione": t.admin_fee,
            "netto_host": t.host_payout,
            "stato": t.status,
        }
        for t in transactions
    ]
    if not rows:
        return pd.DataFrame(columns=_TX_COLUMNS)
    return pd.DataFrame(rows, columns=_TX_COLUMNS)


def fees_by_month(df_tx: pd.DataFrame) -> pd.DataFrame:
    """Pivot: mese × stato transazione, somma commissioni."""
    if df_tx.empty:
        return pd.DataFrame()

    pivot = df_tx.pivot_table(
        values="commissione",
        index="anno_mese",
        columns="stato",
        aggfunc="sum",
        fill_value=0,
        margins=True,
        margins_name="TOTALE",
    )
    return pivot.round(2)


def summary_by_host(df_tx: pd.DataFrame) -> pd.DataFrame:
    """Riepilogo per host, ordinato per commissioni generate."""
    if df_tx.empty:
        return pd.DataFrame()

    summary = df_tx.groupby("host").agg(
        transazioni=("prenotazione", "count"),
        subtotale=("subtotale", "sum"),
        commissioni=("commissione", "sum"),
        netto_host=("netto_host", "sum"),
    ).reset_index()
    for col in ["subtotale", "commissioni", "netto_host"]:
        summary[col] = summary[col].round(2)

    return summary.sort_values("commissioni", ascending=False).reset_index(drop=True)
