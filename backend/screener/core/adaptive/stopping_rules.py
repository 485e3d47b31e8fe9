"""
Stopping rules for the adaptive screener.

Balances measurement precision (SE target), content validity (required
strand coverage and breadth) and test length (min/max questions).

Stopping Rules (evaluated in priority order):
    1. Maximum questions: stop immediately at max_questions
    2. Minimum questions: continue until min_questions are answered
    3. SE target met:
       a. required-strand coverage below the minimum share -> continue
       b. fewer than min_strands_touched distinct strands -> continue
       c. otherwise stop
    4. SE target not met: continue

The wall-clock cap (max_time_minutes) is advisory and is not evaluated here;
see session.is_time_limit_exceeded.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from screener.core.adaptive.content_balancing import (
    count_covered_required_strands,
    get_required_strands,
    required_strand_coverage,
)
from screener.core.adaptive.session import AdaptiveSession
from screener.core.config import settings

logger = logging.getLogger(__name__)

# Default criteria for a ~20 minute grade-level screener
MAX_QUESTIONS = 25
MIN_QUESTIONS = 15
MAX_TIME_MINUTES = 20
TARGET_STANDARD_ERROR = 0.30
REQUIRE_ALL_STRANDS = True

# Share of required strands that must be covered before precision can stop
REQUIRED_COVERAGE_SHARE = 0.75

# Breadth requirement independent of the subject's strand table
MIN_STRANDS_TOUCHED = 3

REASON_MAX_REACHED = "Maximum questions reached"
REASON_MIN_NOT_REACHED = "Minimum questions not reached"
REASON_PRECISION_ACHIEVED = "Target precision achieved with comprehensive coverage"
REASON_CONTINUING = "Continuing assessment"


@dataclass(frozen=True)
class TerminationCriteria:
    """Fixed thresholds governing when an adaptive session ends."""

    max_questions: int = MAX_QUESTIONS
    min_questions: int = MIN_QUESTIONS
    max_time_minutes: int = MAX_TIME_MINUTES
    target_standard_error: float = TARGET_STANDARD_ERROR
    require_all_strands: bool = REQUIRE_ALL_STRANDS
    required_coverage: float = REQUIRED_COVERAGE_SHARE
    min_strands_touched: int = MIN_STRANDS_TOUCHED

    def __post_init__(self) -> None:
        if self.min_questions <= 0:
            raise ValueError(
                f"min_questions must be positive, got {self.min_questions}"
            )
        if self.min_questions > self.max_questions:
            raise ValueError(
                f"min_questions ({self.min_questions}) must not exceed "
                f"max_questions ({self.max_questions})"
            )
        if self.target_standard_error <= 0:
            raise ValueError(
                f"target_standard_error must be positive, got {self.target_standard_error}"
            )
        if self.max_time_minutes <= 0:
            raise ValueError(
                f"max_time_minutes must be positive, got {self.max_time_minutes}"
            )

    @classmethod
    def from_settings(cls) -> "TerminationCriteria":
        """Build criteria from the ADAPTIVE_* application settings."""
        return cls(
            max_questions=settings.ADAPTIVE_MAX_QUESTIONS,
            min_questions=settings.ADAPTIVE_MIN_QUESTIONS,
            max_time_minutes=settings.ADAPTIVE_MAX_TIME_MINUTES,
            target_standard_error=settings.ADAPTIVE_TARGET_STANDARD_ERROR,
            require_all_strands=settings.ADAPTIVE_REQUIRE_ALL_STRANDS,
            required_coverage=settings.ADAPTIVE_REQUIRED_COVERAGE,
            min_strands_touched=settings.ADAPTIVE_MIN_STRANDS_TOUCHED,
        )


DEFAULT_TERMINATION_CRITERIA = TerminationCriteria()


@dataclass
class TerminationDecision:
    """
    Result of evaluating stopping criteria for an adaptive session.

    Attributes:
        should_stop: Whether the session should end.
        reason: Human-readable explanation of the decision.
        details: Diagnostic information:
            - num_questions: Questions answered so far
            - standard_error: Current SE
            - target_standard_error: Configured SE target
            - se_target_met: Whether SE <= target
            - required_coverage: Share of required strands covered
            - required_strands_covered / required_strands_total
            - strands_touched: Distinct strands asked at least once
    """

    should_stop: bool
    reason: str
    details: Dict[str, Any] = field(default_factory=dict)


def should_terminate(
    session: AdaptiveSession,
    criteria: Optional[TerminationCriteria] = None,
) -> TerminationDecision:
    """
    Decide whether the session should stop after its latest response.

    Pure function of the session contents and the criteria.

    Args:
        session: The current session.
        criteria: Thresholds to apply; defaults to DEFAULT_TERMINATION_CRITERIA.

    Returns:
        TerminationDecision with the stop flag, reason and diagnostics.
    """
    if criteria is None:
        criteria = DEFAULT_TERMINATION_CRITERIA

    num_questions = session.num_questions
    se = session.standard_error

    required_total = len(get_required_strands(session.subject))
    required_covered = count_covered_required_strands(
        session.subject, session.strands_touched
    )
    coverage = required_strand_coverage(session.subject, session.strands_touched)
    strands_touched = len(session.strands_touched)

    details: Dict[str, Any] = {
        "num_questions": num_questions,
        "standard_error": se,
        "target_standard_error": criteria.target_standard_error,
        "se_target_met": se <= criteria.target_standard_error,
        "required_coverage": coverage,
        "required_strands_covered": required_covered,
        "required_strands_total": required_total,
        "strands_touched": strands_touched,
    }

    # Rule 1: Maximum questions, stop regardless of precision or coverage
    if num_questions >= criteria.max_questions:
        logger.info(
            f"Session {session.id}: stopping at maximum questions "
            f"({num_questions}/{criteria.max_questions})"
        )
        return TerminationDecision(True, REASON_MAX_REACHED, details)

    # Rule 2: Minimum questions
    if num_questions < criteria.min_questions:
        return TerminationDecision(False, REASON_MIN_NOT_REACHED, details)

    # Rule 3: Precision target met, check coverage before stopping
    if se <= criteria.target_standard_error:
        if criteria.require_all_strands and coverage < criteria.required_coverage:
            logger.debug(
                f"Session {session.id}: SE target met but strand coverage at "
                f"{round(coverage * 100)}% (need {round(criteria.required_coverage * 100)}%)"
            )
            return TerminationDecision(
                False,
                f"Strand coverage incomplete: {required_covered}/{required_total} "
                f"required strands covered",
                details,
            )

        if strands_touched < criteria.min_strands_touched:
            return TerminationDecision(
                False,
                f"Need at least {criteria.min_strands_touched} strands "
                f"for comprehensive assessment",
                details,
            )

        logger.info(
            f"Session {session.id}: stopping, SE={se:.3f} <= "
            f"{criteria.target_standard_error:.3f} after {num_questions} questions "
            f"with {strands_touched} strands"
        )
        return TerminationDecision(True, REASON_PRECISION_ACHIEVED, details)

    # Rule 4: Default, continue
    logger.debug(
        f"Session {session.id}: questions={num_questions}, SE={se:.3f}, "
        f"strands={strands_touched}, required coverage={round(coverage * 100)}%"
    )
    return TerminationDecision(False, REASON_CONTINUING, details)
