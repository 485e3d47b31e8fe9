from screener.models.enums import (
    TERMINAL_STATUSES,
    DifficultyLevel,
    PerformanceLevel,
    QuestionFormat,
    ScreenerLevel,
    SessionStatus,
)
from screener.models.question import CandidateQuestion

__all__ = [
    "CandidateQuestion",
    "DifficultyLevel",
    "PerformanceLevel",
    "QuestionFormat",
    "ScreenerLevel",
    "SessionStatus",
    "TERMINAL_STATUSES",
]
