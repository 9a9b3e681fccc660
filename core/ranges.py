"""
Filtro per intervallo di date con semantica di sovrapposizione.

Una prenotazione [inizio, fine] rientra nel filtro [start, end] se i due
intervalli chiusi si toccano. Estremi del filtro inclusivi: start da
mezzanotte, end fino all'ultimo istante del giorno.
"""

from typing import Iterable, List, Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.dates import BOUNDARY_END, BOUNDARY_START, normalize, parse_date
from core.models import Booking, DateRangeFilter


def matches(candidate_start, candidate_end, flt: Optional[DateRangeFilter]) -> bool:
    """
    True se l'intervallo candidato rientra nel filtro.

    - filtro disattivo o senza estremi → tutto passa
    - inizio candidato non interpretabile → escluso se c'è almeno un estremo
    - solo start: inizia dopo start oppure è ancora in corso a start
    - solo end: inizia entro end
    - entrambi: sovrapposizione (start > end → nessun risultato)
    """
    if flt is None or not flt.enabled:
        return True

    # Un estremo presente ma non interpretabile vale come assente
    start = normalize(flt.start, BOUNDARY_START)
    end = normalize(flt.end, BOUNDARY_END)
    if start is None and end is None:
        return True

    cand_start = parse_date(candidate_start)
    if cand_start is None:
        return False
    cand_end = parse_date(candidate_end) or cand_start

    if end is None:
        return cand_start >= start or cand_end >= start
    if start is None:
        return cand_start <= end
    if start > end:
        return False
    return cand_start <= end and cand_end >= start


def filter_bookings(
    bookings: Iterable[Booking],
    flt: Optional[DateRangeFilter],
    start_field: str = "check_in",
    end_field: Optional[str] = "check_out",
) -> List[Booking]:
    """
    Applica il filtro a una lista di prenotazioni.
    Per la lista "recenti" si usa start_field="created_at", end_field=None.
    """
    result = []
    for b in bookings:
        cand_start = getattr(b, start_field)
        cand_end = getattr(b, end_field) if end_field else None
        if matches(cand_start, cand_end, flt):
            result.append(b)
    return result
