"""
Shared constants for the booking operations toolkit.

Collection names are the single source of truth for the database "schema";
MongoDB creates collections on first write.
"""

# Collections
COLLECTION_CATEGORIES = "categories"
COLLECTION_BRANDS = "brands"
COLLECTION_BOOKINGS = "bookings"
COLLECTION_USERS = "users"
COLLECTION_EMAIL_LOGS = "emaillogs"

INSPECTION_COLLECTIONS = (
    COLLECTION_CATEGORIES,
    COLLECTION_BRANDS,
    COLLECTION_BOOKINGS,
    COLLECTION_USERS,
)
MAINTENANCE_COLLECTIONS = (COLLECTION_CATEGORIES, COLLECTION_BRANDS)

# Identity provider roles (open set; these are the ones the apps know about)
ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"
ROLE_STAFF = "staff"
KNOWN_ROLES = (ROLE_ADMIN, ROLE_CUSTOMER, ROLE_STAFF)
ROLE_CLAIM = "role"

# Console formatter
SEPARATOR_WIDTH = 60
KEY_COLUMN_WIDTH = 20

# Admin panel
REPLY_PREVIEW_LENGTH = 100

# Webhooks
DEFAULT_WEBHOOK_TIMEOUT = 10  # seconds
DEFAULT_BOOKING_WEBHOOK_URL = "http://localhost:5678/webhook/send-booking-email"
DEFAULT_API_BASE_URL = "http://localhost:4000"
EMAIL_HOOK_PATH = "/api/email-hook"
EMAIL_HOOK_LOGS_PATH = "/api/email-hook/logs"
EMAIL_HOOK_STATS_PATH = "/api/email-hook/stats"
