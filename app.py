"""
ZenNest Admin - Prenotazioni, commissioni e saldo admin
Web app su Streamlit Community Cloud con Google Sheets come storage.
"""

import logging
import os
import sys
import tempfile
import uuid
from datetime import datetime

import pandas as pd
import streamlit as st

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import CURRENCY_SYMBOL
from core.balance import (
    payout_status_from_paypal,
    reconcile,
    remaining_after_cashout,
    total_admin_fees,
    total_payouts,
    validate_cashout,
)
from core.dates import PRESETS, calculate_nights, format_date, preset_range
from core.ledger import build_ledger, filter_transactions, rank_guests, rank_hosts
from core.models import DateRangeFilter, Payout, display_name
from core.ranges import filter_bookings
from core.status import booking_status, matches_status_filter, payment_status
from reports.exporter import (
    hosts_report,
    recent_bookings_report,
    report_filename,
    report_to_dataframe,
    reservations_report,
    to_csv_bytes,
    to_excel_bytes,
    to_html,
    transactions_report,
)
from reports.pivot import dashboard_stats, fees_by_month, summary_by_host, transactions_df
from sources.bookings_csv import parse_bookings_csv, parse_payouts_csv
from sources.sheets import (
    load_dashboard_data,
    record_payout,
    update_fee_percentage,
    update_stored_balance,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="ZenNest Admin",
    page_icon="🏨",
    layout="wide",
)

st.title("🏨 ZenNest Admin Dashboard")

PRESET_LABELS = {
    "today": "Oggi",
    "yesterday": "Ieri",
    "thisWeek": "Questa settimana",
    "lastWeek": "Settimana scorsa",
    "thisMonth": "Questo mese",
    "lastMonth": "Mese scorso",
    "thisYear": "Quest'anno",
}


# ── Verifica connessione Google Sheets ──────────────────────────────────────
def check_sheets_connection() -> bool:
    try:
        _ = st.secrets["gcp_service_account"]
        _ = st.secrets["google_sheets"]["spreadsheet_id"]
        return True
    except Exception:
        return False


with st.sidebar:
    st.header("Stato connessione")
    if check_sheets_connection():
        st.success("✓ Google Sheets connesso")
    else:
        st.error("✗ Credenziali mancanti")
        st.caption("Configura `.streamlit/secrets.toml`")

    st.divider()
    st.caption("**Fogli attesi:**")
    with st.expander("bookings / payouts"):
        st.write("Una riga per documento, intestazione con i nomi campo (camelCase).")
    with st.expander("settings"):
        st.write("Coppie key/value: `feePercentage`, `balance`.")


# ── Caricamento dati ─────────────────────────────────────────────────────────
# Una sola lettura per esecuzione dello script; ogni rerun rilegge i fogli
_run_data = {}


def load_data():
    """Intera collezione: ledger e saldo non usano mai la vista filtrata."""
    if "data" not in _run_data:
        _run_data["data"] = load_dashboard_data()
    return _run_data["data"]


def invalidate_data():
    """Dopo una scrittura la prossima lettura torna ai fogli."""
    _run_data.clear()


def name_maps(data: dict):
    guests = {u.id: display_name(u) for u in data["users"]}
    hosts = {h.id: display_name(h, fallback="Host") for h in data["hosts"]}
    return guests, hosts


# ── Export helper ────────────────────────────────────────────────────────────
def export_buttons(report, key: str):
    """CSV, Excel e HTML stampabile dello stesso report."""
    now = datetime.now()
    col_csv, col_xlsx, col_html = st.columns(3)
    with col_csv:
        st.download_button(
            "⬇️ Scarica CSV",
            to_csv_bytes(report),
            file_name=report_filename(report.title, "csv", now),
            mime="text/csv",
            key=f"{key}_csv",
        )
    with col_xlsx:
        st.download_button(
            "⬇️ Scarica Excel",
            to_excel_bytes(report, now),
            file_name=report_filename(report.title, "xlsx", now),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            key=f"{key}_xlsx",
        )
    with col_html:
        st.download_button(
            "🖨️ Scarica HTML (stampa)",
            to_html(report, now).encode("utf-8"),
            file_name=report_filename(report.title, "html", now),
            mime="text/html",
            key=f"{key}_html",
        )


def date_range_picker(key: str) -> DateRangeFilter:
    """Selettore periodo: preset oppure date libere."""
    options = ["Tutto"] + list(PRESETS) + ["Personalizzato"]
    choice = st.selectbox(
        "Periodo",
        options,
        key=f"{key}_preset",
        format_func=lambda x: PRESET_LABELS.get(x, x),
    )
    if choice == "Tutto":
        return DateRangeFilter(enabled=False)
    if choice in PRESETS:
        return preset_range(choice)

    col1, col2 = st.columns(2)
    with col1:
        start = st.date_input("Dal", value=None, key=f"{key}_start")
    with col2:
        end = st.date_input("Al", value=None, key=f"{key}_end")
    return DateRangeFilter(start=start, end=end, enabled=True)


# ── Tabs ─────────────────────────────────────────────────────────────────────
tab_dash, tab_res, tab_fees, tab_users, tab_import = st.tabs(
    ["📊 Dashboard", "📅 Prenotazioni", "💰 Commissioni", "👥 Host e ospiti", "📥 Importa CSV"]
)


# ============================================================
# TAB 1: DASHBOARD
# ============================================================
with tab_dash:
    st.header("Panoramica")

    if not check_sheets_connection():
        st.warning("Connessione Google Sheets non configurata.")
    else:
        try:
            with st.spinner("Caricamento dati..."):
                data = load_data()

            stats = dashboard_stats(data["bookings"], data["hosts"], data["users"])
            k1, k2, k3, k4 = st.columns(4)
            k1.metric("Prenotazioni", stats["total_bookings"])
            k2.metric(f"Ricavi totali {CURRENCY_SYMBOL}", f"{stats['total_revenue']:,.2f}")
            k3.metric("Host", stats["total_hosts"])
            k4.metric("Ospiti", stats["total_guests"])

            k5, k6, k7 = st.columns(3)
            k5.metric("In arrivo", stats["upcoming"])
            k6.metric("Completate", stats["completed"])
            k7.metric("Cancellate", stats["cancelled"])

            st.divider()
            st.subheader("Prenotazioni recenti")
            flt_recent = date_range_picker("recent")
            report = recent_bookings_report(data["bookings"], flt_recent)
            if not report.rows:
                st.info("Nessuna prenotazione nel periodo selezionato.")
            else:
                st.dataframe(report_to_dataframe(report), use_container_width=True, hide_index=True)
                export_buttons(report, "recent")

        except Exception as e:
            logger.exception("Errore caricamento dashboard")
            st.error(f"Errore caricamento: {e}")


# ============================================================
# TAB 2: PRENOTAZIONI
# ============================================================
with tab_res:
    st.header("Prenotazioni")

    if not check_sheets_connection():
        st.warning("Connessione Google Sheets non configurata.")
    else:
        try:
            with st.spinner("Caricamento dati..."):
                data = load_data()

            now = datetime.now()
            col1, col2 = st.columns(2)
            with col1:
                sel_status = st.selectbox(
                    "Stato",
                    ["all", "upcoming", "completed", "cancelled"],
                    format_func=lambda x: {"all": "Tutte", "upcoming": "In arrivo (da pagare)",
                                           "completed": "Completate", "cancelled": "Cancellate"}[x],
                )
            with col2:
                flt = date_range_picker("res")

            in_range = filter_bookings(data["bookings"], flt)
            selected = [b for b in in_range if matches_status_filter(b, sel_status, now)]

            if not selected:
                st.info("Nessuna prenotazione trovata.")
            else:
                rows = []
                for b in selected:
                    rows.append({
                        "ID": b.id[:8],
                        "Ospite": b.guest_name or "Guest",
                        "Alloggio": b.listing_title or "Unknown",
                        "Check-in": format_date(b.check_in),
                        "Check-out": format_date(b.check_out),
                        "Notti": calculate_nights(b.check_in, b.check_out),
                        "Stato": booking_status(b, now),
                        "Pagamento": payment_status(b, now),
                        f"Totale {CURRENCY_SYMBOL}": f"{(b.total or 0):,.2f}",
                    })
                st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

                st.divider()
                st.subheader("Esporta")
                export_buttons(reservations_report(in_range, sel_status, now), "res")

        except Exception as e:
            logger.exception("Errore caricamento prenotazioni")
            st.error(f"Errore caricamento: {e}")


# ============================================================
# TAB 3: COMMISSIONI E SALDO
# ============================================================
with tab_fees:
    st.header("Commissioni e saldo admin")

    if not check_sheets_connection():
        st.warning("Connessione Google Sheets non configurata.")
    else:
        try:
            with st.spinner("Caricamento dati..."):
                data = load_data()
            settings = data["settings"]
            guest_names, host_names = name_maps(data)

            ledger = build_ledger(
                data["bookings"],
                settings.fee_percentage,
                guest_names=guest_names,
                host_names=host_names,
            )

            # Saldo ricalcolato; se fallisce si mostra quello salvato
            try:
                balance = reconcile(ledger, data["payouts"])
                if abs(balance - settings.balance) >= 0.01:
                    update_stored_balance(balance)
                    invalidate_data()
            except Exception as e:
                logger.warning("Ricalcolo saldo fallito, uso saldo salvato: %s", e)
                st.warning("Ricalcolo saldo non riuscito: mostrato il saldo salvato.")
                balance = settings.balance

            k1, k2, k3, k4 = st.columns(4)
            k1.metric(f"Saldo disponibile {CURRENCY_SYMBOL}", f"{balance:,.2f}")
            k2.metric(f"Commissioni totali {CURRENCY_SYMBOL}", f"{total_admin_fees(ledger):,.2f}")
            k3.metric(f"Prelievi {CURRENCY_SYMBOL}", f"{total_payouts(data['payouts']):,.2f}")
            k4.metric("Commissione", f"{settings.fee_percentage:g}%")

            st.divider()

            # ── Filtri ledger ──
            col1, col2, col3 = st.columns(3)
            with col1:
                sel_tx_status = st.selectbox("Stato transazione", ["Tutti", "completed", "pending"])
            with col2:
                host_options = {"Tutti": None}
                host_options.update({name: hid for hid, name in sorted(host_names.items(), key=lambda x: x[1])})
                sel_host = st.selectbox("Host", list(host_options.keys()))
            with col3:
                flt_tx = date_range_picker("fees")

            tx_range = flt_tx if flt_tx.enabled else DateRangeFilter()
            filtered = filter_transactions(
                ledger,
                date_from=tx_range.start,
                date_to=tx_range.end,
                status=None if sel_tx_status == "Tutti" else sel_tx_status,
                host_id=host_options[sel_host],
            )

            if not filtered:
                st.info("Nessuna transazione per i filtri selezionati.")
            else:
                df_tx = transactions_df(filtered)

                st.subheader(f"Commissioni per mese ({CURRENCY_SYMBOL})")
                st.dataframe(fees_by_month(df_tx), use_container_width=True)

                st.subheader("Per host")
                st.dataframe(summary_by_host(df_tx), use_container_width=True, hide_index=True)

                st.subheader("Transazioni")
                report = transactions_report(filtered, tx_range.start, tx_range.end)
                st.dataframe(report_to_dataframe(report), use_container_width=True, hide_index=True)
                export_buttons(report, "fees")

            st.divider()

            # ── Impostazioni commissione ──
            st.subheader("Percentuale commissione")
            new_fee = st.number_input(
                "Commissione admin (%)",
                min_value=0.0,
                max_value=100.0,
                value=float(settings.fee_percentage),
                step=0.5,
            )
            if st.button("💾 Salva commissione"):
                try:
                    update_fee_percentage(new_fee)
                    invalidate_data()
                    st.success(f"✓ Commissione aggiornata a {new_fee:g}%")
                except ValueError as e:
                    st.error(str(e))

            st.divider()

            # ── Prelievo ──
            st.subheader("Preleva saldo")
            col_amt, col_mail = st.columns(2)
            with col_amt:
                amount = st.number_input(f"Importo {CURRENCY_SYMBOL}", min_value=0.0, step=100.0)
            with col_mail:
                paypal_email = st.text_input("Email PayPal")
            paypal_state = st.selectbox("Esito batch PayPal", ["SUCCESS", "PENDING", "PROCESSING", "DENIED"])

            if st.button("✅ Registra prelievo", type="primary"):
                try:
                    validate_cashout(balance, amount)
                    if not paypal_email:
                        raise ValueError("Email PayPal obbligatoria")
                    payout = Payout(
                        id=uuid.uuid4().hex[:20],
                        amount=amount,
                        status=payout_status_from_paypal(paypal_state),
                        paypal_email=paypal_email,
                        remaining_balance=remaining_after_cashout(balance, amount),
                        description="Admin balance cash out",
                        created_at=datetime.now(),
                    )
                    record_payout(payout)
                    st.success(
                        f"✓ Prelievo di {CURRENCY_SYMBOL}{amount:,.2f} registrato "
                        f"({payout.status}). Saldo residuo: {CURRENCY_SYMBOL}{payout.remaining_balance:,.2f}"
                    )
                    invalidate_data()
                except ValueError as e:
                    st.error(str(e))

        except Exception as e:
            logger.exception("Errore caricamento commissioni")
            st.error(f"Errore caricamento commissioni: {e}")


# ============================================================
# TAB 4: HOST E OSPITI
# ============================================================
with tab_users:
    st.header("Classifiche")

    if not check_sheets_connection():
        st.warning("Connessione Google Sheets non configurata.")
    else:
        try:
            with st.spinner("Caricamento dati..."):
                data = load_data()

            ranked_hosts = rank_hosts(data["hosts"], data["bookings"], data["settings"].fee_percentage)
            ranked_guests = rank_guests(data["users"], data["bookings"])

            col_h, col_g = st.columns(2)
            with col_h:
                st.subheader("Host per guadagni")
                report = hosts_report(ranked_hosts)
                st.dataframe(report_to_dataframe(report), use_container_width=True, hide_index=True)
            with col_g:
                st.subheader("Ospiti per prenotazioni")
                st.dataframe(
                    pd.DataFrame([
                        {"#": g.ranking, "Nome": g.name, "Email": g.email, "Prenotazioni": g.total_bookings}
                        for g in ranked_guests
                    ]),
                    use_container_width=True,
                    hide_index=True,
                )

            st.divider()
            st.subheader("Esporta classifica host")
            export_buttons(report, "hosts")

        except Exception as e:
            logger.exception("Errore caricamento classifiche")
            st.error(f"Errore caricamento: {e}")


# ============================================================
# TAB 5: IMPORTA CSV
# ============================================================
with tab_import:
    st.header("Verifica da export CSV")
    st.write(
        "Carica un export CSV della collezione prenotazioni per ricalcolare ledger e saldo offline. "
        "L'export dei payout è facoltativo: se presente viene sottratto dal saldo."
    )

    uploaded = st.file_uploader("File CSV prenotazioni", type=["csv"])
    uploaded_payouts = st.file_uploader("File CSV payout (facoltativo)", type=["csv"])
    fee_csv = st.number_input("Commissione (%)", min_value=0.0, max_value=100.0, value=5.0, step=0.5, key="csv_fee")

    def _to_tempfile(upload) -> str:
        with tempfile.NamedTemporaryFile(delete=False, suffix=".csv") as tmp:
            tmp.write(upload.getbuffer())
            return tmp.name

    if uploaded:
        tmp_paths = [_to_tempfile(uploaded)]
        if uploaded_payouts:
            tmp_paths.append(_to_tempfile(uploaded_payouts))

        try:
            bookings = parse_bookings_csv(tmp_paths[0])
            payouts = parse_payouts_csv(tmp_paths[1]) if uploaded_payouts else []
            ledger = build_ledger(bookings, fee_csv)

            k1, k2, k3, k4 = st.columns(4)
            k1.metric("Prenotazioni lette", len(bookings))
            k2.metric("Transazioni", len(ledger))
            k3.metric(f"Prelievi {CURRENCY_SYMBOL}", f"{total_payouts(payouts):,.2f}")
            k4.metric(f"Saldo {CURRENCY_SYMBOL}", f"{reconcile(ledger, payouts):,.2f}")

            if ledger:
                report = transactions_report(ledger)
                st.dataframe(report_to_dataframe(report), use_container_width=True, hide_index=True)
                export_buttons(report, "csv_import")
        except ValueError as e:
            st.error(str(e))
        finally:
            for path in tmp_paths:
                os.unlink(path)
