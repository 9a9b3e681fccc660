"""
Configurazione centralizzata - modifica qui fee, nomi dei fogli e colonne report.
"""

# Commissione admin di default (%) se le impostazioni non la specificano
DEFAULT_FEE_PERCENTAGE = 5

# Simbolo valuta usato nei report (una sola valuta)
CURRENCY_SYMBOL = "₱"

# Stati prenotazione grezzi salvati nel database
STATUS_CONFIRMED = "confirmed"
STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"
STATUS_REFUNDED = "refunded"

# Stati terminali: nessun pagamento né transazione
TERMINAL_STATUSES = (STATUS_CANCELLED, STATUS_REFUNDED)

# Stati che, con un totale positivo, implicano pagamento ricevuto
PAID_IMPLYING_STATUSES = (STATUS_CONFIRMED, STATUS_COMPLETED)

# Stati payout admin che riducono il saldo
SETTLED_PAYOUT_STATUSES = ("completed", "success")

# Stati PayPal considerati conclusi
PAYPAL_DONE_STATUSES = ("SUCCESS", "PENDING", "COMPLETED")

# Nomi dei fogli nel Google Sheet
SHEET_BOOKINGS = "bookings"
SHEET_PAYOUTS = "payouts"
SHEET_SETTINGS = "settings"
SHEET_USERS = "users"
SHEET_HOSTS = "hosts"

# Colonne del foglio "bookings" (stessi nomi dei campi documento)
BOOKING_COLUMNS = [
    "id", "guestId", "guestName", "guestEmail", "hostId", "hostName",
    "listingId", "listingTitle", "checkIn", "checkOut",
    "status", "paymentStatus", "paymentMethod",
    "paidAmount", "total", "totalAmount",
    "createdAt", "updatedAt", "paidAt", "payoutProcessed",
]

# Colonne del foglio "payouts"
PAYOUT_COLUMNS = [
    "id", "amount", "currency", "status", "paymentMethod", "paypalEmail",
    "payoutBatchId", "transactionId", "remainingBalance", "description", "createdAt",
]

# Colonne dei fogli "users" e "hosts"
PROFILE_COLUMNS = ["id", "firstName", "lastName", "displayName", "name", "email"]

# Colonne report: (chiave, etichetta, larghezza relativa)
RESERVATION_REPORT_COLUMNS = [
    ("bookingId", "Booking ID", 1.2),
    ("guestName", "Guest", 2.5),
    ("listingTitle", "Listing Title", 2.5),
    ("checkIn", "Check-in Date", 1.3),
    ("checkOut", "Check-out Date", 1.3),
    ("status", "Status", 1.2),
    ("paymentStatus", "Payment Status", 1.5),
    ("createdAt", "Created At", 1.3),
]

TRANSACTION_REPORT_COLUMNS = [
    ("date", "Date", 1),
    ("bookingId", "Booking ID", 1),
    ("guest", "Guest", 1),
    ("host", "Host", 1),
    ("subtotal", "Subtotal", 1),
    ("adminFee", "Admin Fee", 1),
    ("hostPayout", "Host Payout", 1),
    ("status", "Status", 1),
]

RECENT_BOOKINGS_REPORT_COLUMNS = [
    ("date", "Date", 1),
    ("status", "Status", 1),
    ("total", "Total", 1),
    ("listingTitle", "Listing", 2),
]

HOSTS_REPORT_COLUMNS = [
    ("ranking", "Rank", 0.6),
    ("name", "Host", 2),
    ("email", "Email", 2),
    ("totalBookings", "Bookings", 1),
    ("totalEarnings", "Earnings", 1.2),
]

# Intestazione dei report stampabili
REPORT_BRAND = "ZENNEST Admin Dashboard"
