"""Exam timing, scoring and integrity constants shared across core and server."""

SECONDS_PER_QUESTION: int = 30
MARKS_PER_ANSWER: int = 1

TIMER_TICK_SECONDS: float = 1.0
HALF_TIME_THRESHOLD: float = 0.5
FINAL_FIFTH_THRESHOLD: float = 0.2
TIME_NOTICE_TICKS: int = 3
HALF_TIME_NOTICE: str = "50% of time remaining!"
FINAL_FIFTH_NOTICE: str = "Only 20% of time remaining!"

VISIBILITY_DEBOUNCE_SECONDS: float = 3.0
DEVTOOLS_THRESHOLD_PX: int = 200
WINDOW_POLL_INTERVAL_MS: int = 800
MAX_INTEGRITY_WARNINGS: int = 2
TERMINATION_REDIRECT_DELAY_MS: int = 800
CHEATING_REDIRECT_URL: str = "/login?cheating_attempt=true"

RESULT_CACHE_TTL_SECONDS: float = 300.0

NOT_AUTHENTICATED_MESSAGE: str = "User not authenticated"
SUBMISSION_FAILED_MESSAGE: str = "Something went wrong during submission."
