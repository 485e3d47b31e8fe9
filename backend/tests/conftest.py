"""
Pytest configuration and shared fixtures for testing.
"""
from datetime import datetime, timezone
from typing import Dict, List

import pytest

from screener.core.adaptive.content_balancing import get_required_strands
from screener.core.adaptive.session import (
    AdaptiveSession,
    QuestionResponse,
    create_session,
)
from screener.models.enums import DifficultyLevel, QuestionFormat
from screener.models.question import CandidateQuestion

FIXED_NOW = datetime(2026, 1, 5, 14, 0, tzinfo=timezone.utc)

MATH_STRANDS = get_required_strands("Mathematics")


def make_question(
    question_id: str,
    strand: str = "Geometry",
    difficulty: int = 3,
    grade_level: str = "5",
    question_format: QuestionFormat = QuestionFormat.MULTIPLE_CHOICE,
    standards=(),
    subject: str = "Mathematics",
) -> CandidateQuestion:
    """Build a CandidateQuestion with sensible defaults."""
    return CandidateQuestion(
        id=question_id,
        strand=strand,
        format=question_format,
        difficulty=DifficultyLevel(difficulty),
        grade_level=grade_level,
        standards=tuple(standards),
        subject=subject,
    )


def add_responses(
    session: AdaptiveSession,
    count: int,
    is_correct: bool = True,
    prefix: str = "filler",
) -> AdaptiveSession:
    """Append count synthetic responses without touching estimates or counters."""
    start = session.num_questions
    for i in range(count):
        session.question_history.append(
            QuestionResponse(
                question_id=f"{prefix}-{start + i}",
                student_answer="A",
                is_correct=is_correct,
                time_spent_seconds=20.0,
                timestamp=FIXED_NOW,
            )
        )
    return session


def record_answers(
    session: AdaptiveSession,
    question_ids,
    is_correct: bool = True,
) -> AdaptiveSession:
    """Append responses to specific question ids (history only)."""
    for question_id in question_ids:
        session.question_history.append(
            QuestionResponse(
                question_id=question_id,
                student_answer="A",
                is_correct=is_correct,
                time_spent_seconds=20.0,
                timestamp=FIXED_NOW,
            )
        )
    return session


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def math_pool() -> List[CandidateQuestion]:
    """Grade 5 Mathematics bank: every required strand at every difficulty.

    Ids are "m{strand}{difficulty}" (e.g. "m13" = first strand, medium), so
    id order follows strand table order.
    """
    pool = []
    for strand_index, strand in enumerate(MATH_STRANDS, start=1):
        for difficulty in range(1, 6):
            pool.append(
                make_question(
                    f"m{strand_index}{difficulty}",
                    strand=strand,
                    difficulty=difficulty,
                    standards=(f"5.S{strand_index}.{difficulty}",),
                )
            )
    return pool


@pytest.fixture
def math_lookup(math_pool) -> Dict[str, CandidateQuestion]:
    return {q.id: q for q in math_pool}


@pytest.fixture
def math_session(fixed_now) -> AdaptiveSession:
    """Fresh grade 5 Mathematics session."""
    return create_session("student-1", "Mathematics", "5", now=fixed_now)
