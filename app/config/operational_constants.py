"""
Operational constants.

Technical/operational constants used across the application.
Includes lock timeouts, retry configurations and task time limits.
"""

# =============================================================================
# LOCK TIMEOUTS (seconds)
# =============================================================================
# Used by distributed_lock.py for Redis locks

# Short operations (single investment refresh)
LOCK_TIMEOUT_SHORT = 30

# Long operations (full accrual pass)
LOCK_TIMEOUT_LONG = 300


# =============================================================================
# BLOCKING TIMEOUTS (seconds)
# =============================================================================
# How long to wait for lock acquisition

BLOCKING_TIMEOUT_DEFAULT = 5.0


# =============================================================================
# RETRY CONFIGURATIONS
# =============================================================================

# Row lock conflicts on balance mutations
BALANCE_LOCK_MAX_RETRIES = 3
BALANCE_LOCK_RETRY_DELAY_BASE = 0.2

# Notification operations
NOTIFICATION_MAX_RETRIES = 3


# =============================================================================
# DRAMATIQ TASK TIME LIMITS (milliseconds)
# =============================================================================

# Short tasks (1 minute) - notification delivery
DRAMATIQ_TIME_LIMIT_SHORT = 60_000


# =============================================================================
# SCHEDULER
# =============================================================================

# Job identifiers
ACCRUAL_JOB_ID = "investment_accrual"

# Seconds a missed run may still fire after its scheduled time
ACCRUAL_MISFIRE_GRACE_SECONDS = 600

# Lock key preventing overlapping accrual passes
ACCRUAL_LOCK_KEY = "investment_accrual_pass"
