"""Domain enums for the adaptive screener.

This module is the single source of truth for enums shared by the adaptive
engine, the serialization schemas and the simulation harness.
"""

import enum


class DifficultyLevel(enum.IntEnum):
    """Ordinal question difficulty (1 = very easy, 5 = very hard)."""

    VERY_EASY = 1
    EASY = 2
    MEDIUM = 3
    HARD = 4
    VERY_HARD = 5


class QuestionFormat(str, enum.Enum):
    """Presentation format of a question."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    MATCHING = "matching"
    DRAG_AND_DROP = "drag_and_drop"


class SessionStatus(str, enum.Enum):
    """Adaptive session lifecycle status."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    TIMED_OUT = "timed_out"


class PerformanceLevel(str, enum.Enum):
    """Coarse performance band derived from theta."""

    FAR_BELOW = "far_below"
    BELOW = "below"
    ON_LEVEL = "on_level"
    ABOVE = "above"


class ScreenerLevel(str, enum.Enum):
    """Screener placement reported back to the dashboard."""

    FAR_BELOW = "far_below"
    BELOW = "below"
    ON_OR_ABOVE = "on_or_above"


TERMINAL_STATUSES = frozenset(
    {SessionStatus.COMPLETED, SessionStatus.ABANDONED, SessionStatus.TIMED_OUT}
)
