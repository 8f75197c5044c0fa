"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "America/Los_Angeles"

# Punctuality window around a shift start (minutes).
PUNCTUALITY_GRACE_MINUTES = 10

# Shift matching windows (minutes).
EARLY_CLOCK_IN_WINDOW = 60
LATE_CLOCK_OUT_WINDOW = 60
DEFAULT_SHIFT_LENGTH = 240
SHIFT_END_LOOKBACK = 240
EXPECTED_ARRIVAL_WINDOW = 180
SCHEDULE_OVERLAP_BUFFER = 30

AGGREGATE_TOLERANCE_MINUTES = 5
DAILY_AGGREGATE_TOLERANCE_MINUTES = 1

# Sessions at or above this length are treated as bad data in team charts.
MAX_SESSION_HOURS = 12

HOURLY_STAFFING_START = 8
HOURLY_STAFFING_END = 16

DEFAULT_CLOCK_ENTRY_LIMIT = 50

# Auto clock-out (local time).
AUTO_CLOCK_OUT_RUN_AT = (17, 30)
AUTO_CLOCK_OUT_STAMP = (17, 20)

ADMIN_SESSION_TTL_SECONDS = 8 * 60 * 60

# Cache TTLs (seconds).
CACHE_TTL_CHECKINS = 60
CACHE_TTL_ACTIVE_TERM = 5 * 60
CACHE_TTL_STUDENT_LIST = 5 * 60
CACHE_TTL_STUDENT_DETAIL = 5 * 60
CACHE_TTL_SCHEDULE = 10 * 60
CACHE_TTL_TERMS = 60 * 60
CACHE_TTL_SCHEDULES_LIST = 60 * 60

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")
