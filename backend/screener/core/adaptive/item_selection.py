"""
Next-question selection for the adaptive screener.

Scores every eligible candidate with a heuristic information value that
combines closeness to the examinee's ability and content-coverage need:

    information = 1 / (1 + |theta_q - theta_target|) + strand_bonus

The selection pipeline:
1. Filter out questions already answered in this session
2. Keep only questions within MAX_GRADE_DEVIATION grades of the session's
   grade; if that would leave nothing, fall back to all unanswered questions
3. Clamp the ability estimate into the theta range the remaining questions
   can actually offer (the target theta)
4. Score each candidate (ability match + strand bonus, see content_balancing)
5. Return the highest-scoring question; ties go to the smallest question id
   so the result does not depend on pool order
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from screener.core.adaptive.ability_model import difficulty_to_theta
from screener.core.adaptive.content_balancing import (
    OPTIONAL_STRAND_BONUS,
    get_underrepresented_strands,
    strand_bonus,
)
from screener.core.adaptive.session import AdaptiveSession
from screener.models.question import CandidateQuestion

logger = logging.getLogger(__name__)

GRADE_ORDER = ["K", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11", "12"]

# Tests never adapt more than one grade level away from the examinee's grade
MAX_GRADE_DEVIATION = 1


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of one selection call."""

    selected_question: CandidateQuestion
    information_value: float
    selection_reason: str
    alternatives_considered: int
    # Equal to information_value today; scored separately later
    content_balance_score: float


@dataclass
class ScoredCandidate:
    """A candidate question with its computed information value."""

    question: CandidateQuestion
    information: float
    distance: float
    strand_bonus: float


def grade_deviation(question_grade: str, session_grade: str) -> Optional[int]:
    """
    Absolute distance between two grades on the K..12 sequence.

    Returns None when either grade is not on the sequence (e.g. course labels).
    """
    if question_grade not in GRADE_ORDER or session_grade not in GRADE_ORDER:
        return None
    return abs(GRADE_ORDER.index(question_grade) - GRADE_ORDER.index(session_grade))


def is_within_grade_bounds(
    question_grade: str,
    session_grade: str,
    max_deviation: int = MAX_GRADE_DEVIATION,
) -> bool:
    """Grades off the K..12 sequence always satisfy the bound."""
    deviation = grade_deviation(question_grade, session_grade)
    if deviation is None:
        return True
    return deviation <= max_deviation


def _apply_grade_bounds(
    candidates: List[CandidateQuestion],
    session_grade: str,
    max_deviation: int,
) -> List[CandidateQuestion]:
    within_bounds = [
        q
        for q in candidates
        if is_within_grade_bounds(q.grade_level, session_grade, max_deviation)
    ]
    if within_bounds:
        logger.debug(
            f"Filtered to {len(within_bounds)} questions within "
            f"±{max_deviation} grade levels of {session_grade}"
        )
        return within_bounds

    logger.warning(
        f"No questions within ±{max_deviation} grade levels of {session_grade}; "
        f"using all {len(candidates)} unanswered questions"
    )
    return candidates


def _score_candidates(
    candidates: List[CandidateQuestion],
    session: AdaptiveSession,
    target_theta: float,
) -> List[ScoredCandidate]:
    underrepresented = get_underrepresented_strands(
        session.subject, session.strands_touched
    )
    scored = []
    for question in candidates:
        distance = abs(difficulty_to_theta(question.difficulty) - target_theta)
        bonus = strand_bonus(question.strand, session.strands_touched, underrepresented)
        scored.append(
            ScoredCandidate(
                question=question,
                information=1.0 / (1.0 + distance) + bonus,
                distance=distance,
                strand_bonus=bonus,
            )
        )

    logger.debug(
        f"Strands covered: {len(session.strands_touched)}, "
        f"underrepresented required: {len(underrepresented)}"
    )
    return scored


def _selection_reason(
    selected: ScoredCandidate,
    ability: float,
    min_theta: float,
    max_theta: float,
) -> str:
    if selected.strand_bonus > OPTIONAL_STRAND_BONUS:
        return f"Prioritizing strand coverage: {selected.question.strand}"
    if ability < min_theta:
        return (
            "Selected easiest available question "
            "(student ability below question bank range)"
        )
    if ability > max_theta:
        return (
            "Selected hardest available question "
            "(student ability above question bank range)"
        )
    return f"Selected based on ability match (distance: {selected.distance:.2f})"


def select_next_question(
    candidate_pool: Iterable[CandidateQuestion],
    session: AdaptiveSession,
    max_grade_deviation: int = MAX_GRADE_DEVIATION,
) -> Optional[SelectionResult]:
    """
    Pick the single best next question for the session.

    Args:
        candidate_pool: Questions the caller is willing to offer. Questions
            already answered in this session are removed here.
        session: The current session (read only).
        max_grade_deviation: Allowed distance from the session's grade.

    Returns:
        SelectionResult, or None if no unanswered question remains.
    """
    answered = session.answered_ids
    unanswered = [q for q in candidate_pool if q.id not in answered]

    if not unanswered:
        logger.info(f"Session {session.id}: question pool exhausted")
        return None

    candidates = _apply_grade_bounds(unanswered, session.grade_level, max_grade_deviation)

    thetas = [difficulty_to_theta(q.difficulty) for q in candidates]
    min_theta = min(thetas)
    max_theta = max(thetas)

    ability = session.current_ability_estimate
    target_theta = max(min_theta, min(max_theta, ability))
    if target_theta != ability:
        logger.debug(
            f"Clamping target ability from {ability:.2f} to {target_theta:.2f} "
            f"(available range [{min_theta:.2f}, {max_theta:.2f}])"
        )

    scored = _score_candidates(candidates, session, target_theta)

    # Highest information first, then smallest id
    selected = min(scored, key=lambda c: (-c.information, c.question.id))
    reason = _selection_reason(selected, ability, min_theta, max_theta)

    logger.debug(
        f"Session {session.id}: selected Q{selected.question.id} "
        f"(info={selected.information:.4f}, strand={selected.question.strand}) "
        f"from {len(scored)} candidates: {reason}",
        extra={
            "question_id": selected.question.id,
            "theta": ability,
            "num_questions": session.num_questions,
        },
    )

    return SelectionResult(
        selected_question=selected.question,
        information_value=selected.information,
        selection_reason=reason,
        alternatives_considered=len(scored),
        content_balance_score=selected.information,
    )
