"""
Candidate question record consumed by the adaptive engine.

Questions are owned by the question bank; the engine only reads the fields
below and never keeps a reference beyond a single selection call.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from screener.models.enums import DifficultyLevel, QuestionFormat


@dataclass(frozen=True)
class CandidateQuestion:
    """Static metadata for one question in the bank."""

    id: str
    strand: str
    format: QuestionFormat
    difficulty: DifficultyLevel
    grade_level: str
    standards: Tuple[str, ...] = ()
    subject: Optional[str] = None

    def __post_init__(self) -> None:
        # Accept plain values from JSON-ish callers
        if not isinstance(self.difficulty, DifficultyLevel):
            object.__setattr__(self, "difficulty", DifficultyLevel(self.difficulty))
        if not isinstance(self.format, QuestionFormat):
            object.__setattr__(self, "format", QuestionFormat(self.format))
        if not isinstance(self.standards, tuple):
            object.__setattr__(self, "standards", tuple(self.standards))
