"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_WORKDAY_START = time(9, 0)
DEFAULT_LATE_GRACE_MINUTES = 0
DEFAULT_PAYROLL_OVERDUE_DAYS = 30
DEFAULT_STALE_PENDING_DAYS = 7
DEFAULT_STALE_DRAFT_DAYS = 7
DEFAULT_RECENT_LIMIT = 10
LEAVE_LOCK_TIMEOUT_SECONDS = 5
