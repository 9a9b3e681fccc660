"""
Google Sheets come sorgente dati del pannello admin.

Il Google Sheet ha questi fogli (una riga per documento, colonne = nomi campo):
  - bookings → prenotazioni
  - payouts  → prelievi del saldo admin
  - settings → coppie key/value (feePercentage, balance)
  - users    → ospiti
  - hosts    → host

Autenticazione via Service Account (credenziali in Streamlit secrets):
  1. Crea Service Account su Google Cloud
  2. Condividi il Google Sheet con l'email del service account
  3. Metti le credenziali in .streamlit/secrets.toml
     ([gcp_service_account] e [google_sheets] spreadsheet_id)

Le letture rileggono sempre l'intero foglio: ledger e saldo si calcolano
sull'intera collezione. Errori di rete/API vengono propagati al chiamante.
"""

import logging
from datetime import datetime
from typing import List

import gspread
import streamlit as st

from config import (
    BOOKING_COLUMNS,
    DEFAULT_FEE_PERCENTAGE,
    PAYOUT_COLUMNS,
    PROFILE_COLUMNS,
    SHEET_BOOKINGS,
    SHEET_HOSTS,
    SHEET_PAYOUTS,
    SHEET_SETTINGS,
    SHEET_USERS,
)
from core.models import AdminSettings, Booking, Payout, UserProfile
from sources.records import cell, payout_to_row, row_to_booking, row_to_payout, row_to_profile, to_float

logger = logging.getLogger(__name__)

SETTINGS_COLUMNS = ["key", "value"]

# Intestazioni usate quando un foglio viene creato
_SHEET_HEADERS = {
    SHEET_BOOKINGS: BOOKING_COLUMNS,
    SHEET_PAYOUTS: PAYOUT_COLUMNS,
    SHEET_SETTINGS: SETTINGS_COLUMNS,
    SHEET_USERS: PROFILE_COLUMNS,
    SHEET_HOSTS: PROFILE_COLUMNS,
}


@st.cache_resource
def get_gspread_client():
    """
    Restituisce client gspread autenticato via Service Account.
    Le credenziali vengono da st.secrets (Streamlit Cloud) o da
    .streamlit/secrets.toml in locale.
    """
    creds_dict = dict(st.secrets["gcp_service_account"])
    gc = gspread.service_account_from_dict(creds_dict)
    return gc


def get_sheet(sheet_name: str, create: bool = True):
    """Apre il foglio specificato; se manca lo crea con l'intestazione (create=True)."""
    gc = get_gspread_client()
    spreadsheet_id = st.secrets["google_sheets"]["spreadsheet_id"]
    sh = gc.open_by_key(spreadsheet_id)
    try:
        return sh.worksheet(sheet_name)
    except gspread.WorksheetNotFound:
        if not create:
            raise
        headers = _SHEET_HEADERS.get(sheet_name, [])
        ws = sh.add_worksheet(title=sheet_name, rows=1000, cols=max(len(headers), 2))
        if headers:
            ws.append_row(headers)
        return ws


# ── Letture ──────────────────────────────────────────────────────────────────

def fetch_all_bookings() -> List[Booking]:
    ws = get_sheet(SHEET_BOOKINGS)
    records = ws.get_all_records()
    bookings = [row_to_booking(r) for r in records if cell(r, "id") is not None]
    logger.info("Lette %d prenotazioni da '%s'", len(bookings), SHEET_BOOKINGS)
    return bookings


def fetch_all_payouts() -> List[Payout]:
    """Payout admin; foglio non ancora creato = nessun payout."""
    try:
        ws = get_sheet(SHEET_PAYOUTS, create=False)
    except gspread.WorksheetNotFound:
        logger.warning("Foglio '%s' assente: nessun payout da sottrarre", SHEET_PAYOUTS)
        return []
    return [row_to_payout(r) for r in ws.get_all_records()]


def _settings_map(ws) -> dict:
    return {
        str(r.get("key", "")).strip(): r.get("value")
        for r in ws.get_all_records()
        if str(r.get("key", "")).strip()
    }


def fetch_admin_settings() -> AdminSettings:
    """Commissione e saldo salvato; valori mancanti → fee 5%, saldo 0."""
    values = _settings_map(get_sheet(SHEET_SETTINGS))
    fee = to_float(cell(values, "feePercentage")) or DEFAULT_FEE_PERCENTAGE
    balance = to_float(cell(values, "balance")) or 0.0
    return AdminSettings(fee_percentage=fee, balance=balance)


def fetch_users() -> List[UserProfile]:
    return [row_to_profile(r) for r in get_sheet(SHEET_USERS).get_all_records() if cell(r, "id") is not None]


def fetch_hosts() -> List[UserProfile]:
    return [row_to_profile(r) for r in get_sheet(SHEET_HOSTS).get_all_records() if cell(r, "id") is not None]


# ── Scritture ────────────────────────────────────────────────────────────────

def _set_setting(ws, key: str, value) -> None:
    """Aggiorna la riga key/value, oppure la aggiunge in fondo."""
    all_values = ws.get_all_values()
    for idx, row in enumerate(all_values[1:], start=2):
        if row and row[0].strip() == key:
            ws.update_cell(idx, 2, value)
            return
    ws.append_row([key, value], value_input_option="USER_ENTERED")


def update_fee_percentage(fee_percentage: float) -> None:
    if fee_percentage is None or not 0 < fee_percentage <= 100:
        raise ValueError(f"Commissione non valida: {fee_percentage} (ammessi valori tra 0 e 100)")
    ws = get_sheet(SHEET_SETTINGS)
    _set_setting(ws, "feePercentage", fee_percentage)
    _set_setting(ws, "updatedAt", datetime.now().strftime("%Y-%m-%dT%H:%M:%S"))
    logger.info("Commissione admin aggiornata a %s%%", fee_percentage)


def update_stored_balance(balance: float) -> None:
    """Saldo salvato: solo fallback se il ricalcolo fallisce."""
    ws = get_sheet(SHEET_SETTINGS)
    _set_setting(ws, "balance", round(max(0.0, balance), 2))


def record_payout(payout: Payout) -> None:
    """Registra un prelievo admin nel foglio payouts."""
    ws = get_sheet(SHEET_PAYOUTS)
    ws.append_row(payout_to_row(payout), value_input_option="USER_ENTERED")
    logger.info("Payout %s registrato: %.2f (%s)", payout.id, payout.amount, payout.status)


# ── Lettura completa ─────────────────────────────────────────────────────────

def load_dashboard_data() -> dict:
    """
    Tutte le collezioni lette adesso, senza cache.
    Il chiamante la rilegge dopo ogni scrittura.
    """
    return {
        "bookings": fetch_all_bookings(),
        "payouts": fetch_all_payouts(),
        "settings": fetch_admin_settings(),
        "users": fetch_users(),
        "hosts": fetch_hosts(),
    }
