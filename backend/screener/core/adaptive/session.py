"""
Adaptive session state and lifecycle transitions.

A session is the mutable record of one examinee's adaptive run. The engine is
stateless between calls; everything it needs lives on the AdaptiveSession,
which callers persist however they like (see screener.schemas.adaptive).

Lifecycle:
    create_session -> in_progress
    in_progress -> completed   (finalize_session)
    in_progress -> abandoned   (abandon_session)
    in_progress -> timed_out   (time_out_session)

Terminal sessions accept no further responses or transitions.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from screener.core.adaptive.exceptions import SessionClosedError
from screener.core.datetime_utils import ensure_timezone_aware, utc_now
from screener.models.enums import TERMINAL_STATUSES, SessionStatus

logger = logging.getLogger(__name__)

INITIAL_ABILITY_ESTIMATE = 0.0  # Start at average ability
INITIAL_STANDARD_ERROR = 1.0  # Maximal initial uncertainty


@dataclass(frozen=True)
class QuestionResponse:
    """One answer event. Immutable once recorded."""

    question_id: str
    student_answer: Any
    is_correct: bool
    time_spent_seconds: float
    timestamp: datetime


@dataclass
class AdaptiveSession:
    """In-memory representation of one examinee's adaptive run."""

    id: str
    student_id: str
    subject: str
    grade_level: str
    current_ability_estimate: float
    standard_error: float
    start_time: datetime
    last_update_time: datetime
    status: SessionStatus = SessionStatus.IN_PROGRESS
    question_history: List[QuestionResponse] = field(default_factory=list)
    strands_touched: Dict[str, int] = field(default_factory=dict)
    formats_used: Dict[str, int] = field(default_factory=dict)
    difficulties_used: Dict[int, int] = field(default_factory=dict)
    standards_covered: List[str] = field(default_factory=list)
    # Final results (set on the terminal transition)
    final_ability_estimate: Optional[float] = None
    final_standard_error: Optional[float] = None
    total_questions_answered: Optional[int] = None
    total_correct: Optional[int] = None
    completion_time: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def num_questions(self) -> int:
        return len(self.question_history)

    @property
    def correct_so_far(self) -> int:
        return sum(1 for r in self.question_history if r.is_correct)

    @property
    def answered_ids(self) -> Set[str]:
        return {r.question_id for r in self.question_history}

    def ensure_open(self) -> None:
        """Raise SessionClosedError if the session is terminal."""
        if self.is_terminal:
            raise SessionClosedError(self.id, self.status.value)


def create_session(
    student_id: str,
    subject: str,
    grade_level: str,
    now: Optional[datetime] = None,
) -> AdaptiveSession:
    """
    Create a new adaptive session at average ability with maximal uncertainty.

    Args:
        student_id: Examinee identifier.
        subject: Subject name (drives the required-strand table).
        grade_level: Nominal grade ("K", "1".."12" or a course label).
        now: Creation time; defaults to the current UTC time.

    Returns:
        AdaptiveSession with status in_progress and empty history.
    """
    created_at = now or utc_now()
    session = AdaptiveSession(
        id=f"session-{uuid.uuid4().hex}",
        student_id=student_id,
        subject=subject,
        grade_level=grade_level,
        current_ability_estimate=INITIAL_ABILITY_ESTIMATE,
        standard_error=INITIAL_STANDARD_ERROR,
        start_time=created_at,
        last_update_time=created_at,
    )

    logger.info(
        f"Created adaptive session {session.id} for student {student_id} "
        f"({subject}, grade {grade_level})",
        extra={
            "student_id": student_id,
            "subject": subject,
            "grade_level": grade_level,
        },
    )
    return session


def _close(
    session: AdaptiveSession,
    status: SessionStatus,
    now: Optional[datetime],
) -> AdaptiveSession:
    session.ensure_open()

    closed_at = now or utc_now()
    session.status = status
    session.final_ability_estimate = session.current_ability_estimate
    session.final_standard_error = session.standard_error
    session.total_questions_answered = session.num_questions
    session.total_correct = session.correct_so_far
    session.completion_time = closed_at
    session.last_update_time = closed_at

    logger.info(
        f"Session {session.id} {status.value}: "
        f"theta={session.current_ability_estimate:.3f}, "
        f"SE={session.standard_error:.3f}, "
        f"questions={session.total_questions_answered}, "
        f"correct={session.total_correct}",
        extra={
            "student_id": session.student_id,
            "theta": session.current_ability_estimate,
            "standard_error": session.standard_error,
            "num_questions": session.total_questions_answered,
        },
    )
    return session


def finalize_session(
    session: AdaptiveSession, now: Optional[datetime] = None
) -> AdaptiveSession:
    """
    Mark the session completed and freeze its final results.

    Mutates the session in place and returns it.

    Raises:
        SessionClosedError: If the session is already terminal.
    """
    return _close(session, SessionStatus.COMPLETED, now)


def abandon_session(
    session: AdaptiveSession, now: Optional[datetime] = None
) -> AdaptiveSession:
    """Mark the session abandoned. Raises SessionClosedError if terminal."""
    return _close(session, SessionStatus.ABANDONED, now)


def time_out_session(
    session: AdaptiveSession, now: Optional[datetime] = None
) -> AdaptiveSession:
    """Mark the session timed out. Raises SessionClosedError if terminal."""
    return _close(session, SessionStatus.TIMED_OUT, now)


def elapsed_minutes(session: AdaptiveSession, now: Optional[datetime] = None) -> float:
    """Wall-clock minutes since the session started (or until it closed)."""
    end = ensure_timezone_aware(session.completion_time or now or utc_now())
    start = ensure_timezone_aware(session.start_time)
    return max(0.0, (end - start).total_seconds() / 60.0)


def is_time_limit_exceeded(
    session: AdaptiveSession,
    max_minutes: float,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check the advisory wall-clock cap.

    The cap is never enforced by should_terminate; callers that care about it
    check here and transition the session with time_out_session.
    """
    if max_minutes <= 0:
        raise ValueError(f"max_minutes must be positive, got {max_minutes}")
    return elapsed_minutes(session, now) >= max_minutes
