"""Quiz-related constants shared by the session services."""

DEFAULT_QUIZ_DURATION_MINUTES: int = 60
DEFAULT_QUIZ_DURATION_SECONDS: int = DEFAULT_QUIZ_DURATION_MINUTES * 60
TIMER_TICK_INTERVAL_MS: int = 1000

MONITOR_REFRESH_INTERVAL_MS: int = 30_000
MAX_MONITOR_NOTIFICATIONS: int = 5
