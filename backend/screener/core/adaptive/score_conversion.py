"""
Screener result scoring.

Turns a finished (or in-progress) adaptive session into the report shown on
the class dashboard.

Ability:
    theta = final_ability_estimate if the session was closed, else the
    current estimate. The same rule applies to the standard error.

Screener Level:
    performance level far_below  -> far_below
    performance level below      -> below
    on_level / above             -> on_or_above

Strand Scores:
    percent_correct = round(100 * correct / asked) for every strand touched,
    where asked is the strand's exposure count on the session.

Standards Performance:
    Every resolved response counts one attempt (and one correct, if correct)
    toward each standard its question is aligned to.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Optional

from screener.core.adaptive.ability_model import (
    ConfidenceInterval,
    ability_confidence_interval,
    ability_to_percentile,
    theta_to_performance_level,
)
from screener.core.adaptive.session import AdaptiveSession, elapsed_minutes
from screener.models.enums import PerformanceLevel, ScreenerLevel, SessionStatus
from screener.models.question import CandidateQuestion

logger = logging.getLogger(__name__)

_SCREENER_LEVELS = {
    PerformanceLevel.FAR_BELOW: ScreenerLevel.FAR_BELOW,
    PerformanceLevel.BELOW: ScreenerLevel.BELOW,
}


@dataclass
class StandardPerformance:
    """Attempts and correct answers for one learning standard.

    Attributes:
        standard: Standard code (e.g., "5.NF.A.1").
        strand: Strand of the first question seen for this standard.
        attempted: Responses to questions aligned to the standard.
        correct: Correct responses among those.
    """

    standard: str
    strand: str
    attempted: int = 0
    correct: int = 0


@dataclass
class ScreenerResult:
    """Dashboard-facing summary of one adaptive session."""

    session_id: str
    student_id: str
    subject: str
    grade_level: str
    status: SessionStatus
    theta: float
    standard_error: float
    confidence_interval: ConfidenceInterval
    percentile: int
    performance_level: PerformanceLevel
    screener_level: ScreenerLevel
    questions_answered: int
    correct_count: int
    duration_minutes: float
    strand_scores: Dict[str, int] = field(default_factory=dict)
    standards_performance: List[StandardPerformance] = field(default_factory=list)


def performance_to_screener_level(level: PerformanceLevel) -> ScreenerLevel:
    """Collapse the four performance bands into the three screener levels."""
    return _SCREENER_LEVELS.get(level, ScreenerLevel.ON_OR_ABOVE)


def calculate_strand_scores(
    session: AdaptiveSession,
    question_lookup: Mapping[str, CandidateQuestion],
) -> Dict[str, int]:
    """
    Percent correct per touched strand.

    Responses whose question is missing from the lookup count toward the
    strand's exposures (they were asked) but cannot be credited as correct.
    """
    correct_by_strand: Dict[str, int] = {}
    for response in session.question_history:
        question = question_lookup.get(response.question_id)
        if question is None or not response.is_correct:
            continue
        correct_by_strand[question.strand] = (
            correct_by_strand.get(question.strand, 0) + 1
        )

    scores: Dict[str, int] = {}
    for strand, asked in session.strands_touched.items():
        correct = correct_by_strand.get(strand, 0)
        scores[strand] = round(100 * correct / asked) if asked > 0 else 0
    return scores


def calculate_standards_performance(
    session: AdaptiveSession,
    question_lookup: Mapping[str, CandidateQuestion],
) -> List[StandardPerformance]:
    """
    Attempted/correct counts per standard, in first-seen order.
    """
    performance: Dict[str, StandardPerformance] = {}
    for response in session.question_history:
        question = question_lookup.get(response.question_id)
        if question is None:
            continue
        for standard in question.standards:
            entry = performance.get(standard)
            if entry is None:
                entry = StandardPerformance(standard=standard, strand=question.strand)
                performance[standard] = entry
            entry.attempted += 1
            if response.is_correct:
                entry.correct += 1
    return list(performance.values())


def build_screener_result(
    session: AdaptiveSession,
    question_lookup: Mapping[str, CandidateQuestion],
    level: float = 0.95,
    now: Optional[datetime] = None,
) -> ScreenerResult:
    """
    Score a session for the dashboard.

    Args:
        session: The session to score; usually completed, but in-progress
            sessions are scored from their current estimate.
        question_lookup: Question id -> metadata for the session's history.
        level: Confidence level for the ability interval.
        now: Reference time for the duration of an open session.

    Returns:
        ScreenerResult with ability, placement, strand and standard breakdowns.

    Raises:
        ValueError: If level is outside (0, 1).
    """
    theta = (
        session.final_ability_estimate
        if session.final_ability_estimate is not None
        else session.current_ability_estimate
    )
    se = (
        session.final_standard_error
        if session.final_standard_error is not None
        else session.standard_error
    )

    performance_level = theta_to_performance_level(theta)
    result = ScreenerResult(
        session_id=session.id,
        student_id=session.student_id,
        subject=session.subject,
        grade_level=session.grade_level,
        status=session.status,
        theta=theta,
        standard_error=se,
        confidence_interval=ability_confidence_interval(theta, se, level),
        percentile=ability_to_percentile(theta),
        performance_level=performance_level,
        screener_level=performance_to_screener_level(performance_level),
        questions_answered=session.num_questions,
        correct_count=session.correct_so_far,
        duration_minutes=round(elapsed_minutes(session, now), 2),
        strand_scores=calculate_strand_scores(session, question_lookup),
        standards_performance=calculate_standards_performance(
            session, question_lookup
        ),
    )

    logger.debug(
        f"Scored session {session.id}: theta={theta:.3f}, "
        f"percentile={result.percentile}, level={result.screener_level.value}"
    )
    return result
