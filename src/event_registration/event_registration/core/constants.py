"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_DAYS = 7
DEFAULT_NOTIFICATION_LIMIT = 20
MIN_PASSWORD_LENGTH = 6
MAX_UPLOAD_BYTES = 5 * 1024 * 1024

# Form keys for answers look like "field_12".
FIELD_KEY_PREFIX = "field_"

# Sweep look-ahead windows, in hours from midnight of the sweep day.
EVENT_REMINDER_WINDOW_HOURS = (23, 25)
DEADLINE_REMINDER_WINDOW_HOURS = (47, 49)
DEFAULT_SWEEP_HOUR = 1
