"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_WORK_START = time(9, 0)
DEFAULT_LATE_GRACE_MINUTES = 0
DEFAULT_HALF_DAY_HOURS = 4.0
DEFAULT_TIMEZONE = "UTC"

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 10
DEFAULT_LIST_LIMIT = 20
MAX_PAGE_LIMIT = 100
DEFAULT_TREND_DAYS = 7

DEFAULT_EVENT_QUEUE_SIZE = 100
EVENT_KEEPALIVE_SECONDS = 15

EXPORT_COLUMNS = (
    "Date",
    "Name",
    "Email",
    "Department",
    "Check In",
    "Check Out",
    "Work Hours",
    "Status",
)
