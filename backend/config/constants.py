# backend/config/constants.py

# -----------------------------
# SETTINGS CACHE
# -----------------------------
SETTINGS_CACHE_PREFIX = "store_settings_"
DEFAULT_CACHE_TTL_SECONDS = 300       # 5 minutes

# -----------------------------
# SCHEDULE
# -----------------------------
WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
DEFAULT_OPEN_TIME = "09:00"
DEFAULT_CLOSE_TIME = "18:00"
DEFAULT_ORDER_SLOTS = (
    ("09:00", "12:00"),
    ("14:00", "18:00"),
)
CLOSED_BY_DEFAULT = {"sunday"}

TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"

# -----------------------------
# LIMITS
# -----------------------------
MAX_STORE_DESCRIPTION = 1000
MAX_MAINTENANCE_MESSAGE = 500
MAX_POLICY_TEXT = 1000
MAX_OVERRIDE_REASON = 500

MIN_ORDER_QUANTITY_CAP = 1
MAX_ORDER_QUANTITY_CAP = 1000
DEFAULT_MAX_ORDER_QUANTITY = 10

MAX_RETURN_DAYS = 365
MAX_REFUND_DAYS = 365
MAX_PROCESSING_DAYS = 30
MAX_CANCELLATION_HOURS = 168          # 7 days
MAX_CHARGE_PERCENT = 100

DEFAULT_MAX_COD_AMOUNT = 50000

NON_CANCELLABLE_STATUSES = ("shipped", "out_for_delivery", "delivered")

# -----------------------------
# ADMIN LISTING
# -----------------------------
SETTINGS_STATUS_FILTERS = ("all", "open", "closed", "maintenance")
MAX_PAGE_SIZE = 100
