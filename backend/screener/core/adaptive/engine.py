"""
AdaptiveSessionManager: orchestrator for adaptive screener sessions.

Runs the screener loop the dashboard drives one answer at a time:

    start -> select first question
    submit_answer -> process response -> check stopping rules
        stop      -> finalize
        continue  -> select next question
            none left -> finalize (question bank exhausted)

The manager holds no per-session state; everything lives on the
AdaptiveSession, so one manager can serve any number of independent sessions.
Callers must serialize updates to any single session.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from screener.core.adaptive.ability_estimation import process_response
from screener.core.adaptive.item_selection import SelectionResult, select_next_question
from screener.core.adaptive.session import (
    AdaptiveSession,
    abandon_session,
    create_session,
    finalize_session,
    is_time_limit_exceeded,
    time_out_session,
)
from screener.core.adaptive.stopping_rules import (
    TerminationCriteria,
    TerminationDecision,
    should_terminate,
)
from screener.core.logging_config import session_id_context
from screener.models.question import CandidateQuestion

logger = logging.getLogger(__name__)

REASON_POOL_EXHAUSTED = "Question bank exhausted"


@dataclass
class AdaptiveStepResult:
    """What a single submitted answer produced."""

    session: AdaptiveSession
    decision: TerminationDecision
    next_selection: Optional[SelectionResult]
    # Whether this answer ended the session; fixed when the step is built
    finished: bool = False


class AdaptiveSessionManager:
    """
    Orchestrator for adaptive screener sessions.

    Manages:
    - Session creation and first-question selection
    - Response processing and ability re-estimation
    - Stopping-rule evaluation and finalization
    - Exhausted-pool and wall-clock timeout handling
    """

    def __init__(self, criteria: Optional[TerminationCriteria] = None):
        self.criteria = criteria or TerminationCriteria.from_settings()

    @contextmanager
    def _session_context(self, session: AdaptiveSession) -> Iterator[None]:
        token = session_id_context.set(session.id)
        try:
            yield
        finally:
            session_id_context.reset(token)

    def start(
        self,
        student_id: str,
        subject: str,
        grade_level: str,
        candidate_pool: Sequence[CandidateQuestion],
        now: Optional[datetime] = None,
    ) -> Tuple[AdaptiveSession, Optional[SelectionResult]]:
        """
        Create a session and choose its first question.

        Returns:
            Tuple of (session, first selection). The selection is None when
            the pool is empty; the session is left open so the caller can
            decide how to report it.
        """
        session = create_session(student_id, subject, grade_level, now=now)
        with self._session_context(session):
            selection = select_next_question(candidate_pool, session)
            if selection is None:
                logger.warning(
                    f"Session {session.id} started with an empty question pool"
                )
        return session, selection

    def submit_answer(
        self,
        session: AdaptiveSession,
        question: CandidateQuestion,
        is_correct: bool,
        time_spent_seconds: float,
        candidate_pool: Iterable[CandidateQuestion],
        question_lookup: Mapping[str, CandidateQuestion],
        student_answer: Optional[Any] = None,
        now: Optional[datetime] = None,
    ) -> AdaptiveStepResult:
        """
        Apply one answer and advance the session.

        The session is mutated in-place. When the stopping rules fire, or no
        unanswered question remains, the session is finalized and
        next_selection is None.

        Raises:
            SessionClosedError: If the session is already terminal.
        """
        with self._session_context(session):
            process_response(
                session,
                question,
                is_correct,
                time_spent_seconds,
                question_lookup,
                student_answer=student_answer,
                now=now,
            )

            decision = should_terminate(session, self.criteria)
            if decision.should_stop:
                finalize_session(session, now=now)
                return AdaptiveStepResult(session, decision, None, finished=True)

            selection = select_next_question(candidate_pool, session)
            if selection is None:
                finalize_session(session, now=now)
                exhausted = TerminationDecision(
                    should_stop=True,
                    reason=REASON_POOL_EXHAUSTED,
                    details=decision.details,
                )
                return AdaptiveStepResult(session, exhausted, None, finished=True)

            return AdaptiveStepResult(session, decision, selection)

    def check_time_limit(
        self, session: AdaptiveSession, now: Optional[datetime] = None
    ) -> bool:
        """
        Time out the session if it ran past the advisory wall-clock cap.

        Returns:
            True if the session was transitioned to timed_out.
        """
        if session.is_terminal:
            return False
        if not is_time_limit_exceeded(session, self.criteria.max_time_minutes, now):
            return False

        with self._session_context(session):
            logger.info(
                f"Session {session.id} exceeded {self.criteria.max_time_minutes} minutes"
            )
            time_out_session(session, now=now)
        return True

    def abandon(
        self, session: AdaptiveSession, now: Optional[datetime] = None
    ) -> AdaptiveSession:
        """Mark the session abandoned (e.g. the examinee closed the screener)."""
        with self._session_context(session):
            return abandon_session(session, now=now)
