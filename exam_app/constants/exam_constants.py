"""Exam-related constants shared across client and core layers."""

OPTION_COUNT: int = 4
OPTION_LETTERS: tuple[str, ...] = ("A", "B", "C", "D")
DEFAULT_QUESTION_MARKS: int = 1
TICK_INTERVAL_MS: int = 1000
LOW_TIME_WARNING_SECONDS: int = 300
PERCENTAGE_DECIMALS: int = 2
ACCESS_TOKEN_MINUTES: int = 60
