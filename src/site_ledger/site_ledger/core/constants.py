"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_RATE = 0.0
DEFAULT_WRITE_WORKERS = 2
DEFAULT_NOTIFICATION_LIMIT = 50

ISO_DATE_FORMAT = "%Y-%m-%d"

USERS_ROOT = "users"
