"""
Lettura di un export CSV delle collezioni bookings/payouts.

Come esportare:
  Firestore → export della collezione in CSV (una riga per documento)
  oppure Google Sheet → File → Scarica → CSV

Struttura CSV: intestazione con i nomi campo dei documenti (camelCase),
encoding UTF-8 BOM (fallback latin-1). Colonne sconosciute ignorate;
alias accettati per l'id documento ("bookingId", "documentId", "__id__").
"""

import logging
from typing import List

import pandas as pd

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import Booking, Payout
from sources.records import cell, row_to_booking, row_to_payout

logger = logging.getLogger(__name__)

_ID_ALIASES = ("bookingId", "documentId", "__id__", "_id")


def _read_csv(filepath: str, label: str) -> pd.DataFrame:
    try:
        df = pd.read_csv(filepath, encoding="utf-8-sig", dtype=str, na_filter=False)
    except UnicodeDecodeError:
        try:
            df = pd.read_csv(filepath, encoding="latin-1", dtype=str, na_filter=False)
        except Exception as e:
            raise ValueError(f"Errore lettura CSV {label}: {e}")
    except Exception as e:
        raise ValueError(f"Errore lettura CSV {label}: {e}")

    # Normalizza nomi colonne
    df.columns = df.columns.str.strip()
    if "id" not in df.columns:
        for alias in _ID_ALIASES:
            if alias in df.columns:
                df = df.rename(columns={alias: "id"})
                break
    return df


def parse_bookings_csv(filepath: str) -> List[Booking]:
    """
    Legge il CSV prenotazioni e restituisce lista di Booking.
    Righe senza id vengono saltate.
    """
    df = _read_csv(filepath, "prenotazioni")

    bookings = []
    skipped = 0
    for row in df.to_dict(orient="records"):
        if cell(row, "id") is None:
            skipped += 1
            continue
        bookings.append(row_to_booking(row))

    if skipped:
        logger.warning("%s: %d righe senza id ignorate", os.path.basename(filepath), skipped)
    logger.info("%s: %d prenotazioni lette", os.path.basename(filepath), len(bookings))
    return bookings


def parse_payouts_csv(filepath: str) -> List[Payout]:
    df = _read_csv(filepath, "payout")
    return [row_to_payout(row) for row in df.to_dict(orient="records")]
