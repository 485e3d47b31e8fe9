"""
Ability estimation for the adaptive screener.

Uses a simplified logit-style estimate rather than full likelihood
maximization: the examinee is placed at the average theta of the questions
they attempted, shifted by how far their proportion correct sits from 50%.

Formula:
    theta_hat = mean(theta_q) + (p_correct - 0.5) * 2,  clamped to [-3, 3]

    where theta_q is the difficulty anchor of each attempted question and both
    averages run over responses whose question resolves in the lookup.

Standard error shrinks with test length and floors at 0.2:
    SE(n) = max(0.2, 1 / sqrt(n + 1))
"""

import logging
import math
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from screener.core.adaptive.ability_model import difficulty_to_theta
from screener.core.adaptive.session import AdaptiveSession, QuestionResponse
from screener.core.datetime_utils import utc_now
from screener.models.question import CandidateQuestion

logger = logging.getLogger(__name__)

THETA_MIN = -3.0
THETA_MAX = 3.0
CORRECT_RATE_SCALE = 2.0  # Full marks shift the estimate up by one theta unit
STANDARD_ERROR_FLOOR = 0.2


def estimate_ability(
    responses: Sequence[QuestionResponse],
    question_lookup: Mapping[str, CandidateQuestion],
) -> float:
    """
    Estimate ability from the full response history.

    Responses whose question is missing from the lookup are skipped and do
    not contribute to either average.

    Args:
        responses: Response history in submission order.
        question_lookup: Question id -> question metadata.

    Returns:
        Theta estimate in [-3, 3]; 0.0 when no response resolves.
    """
    resolved = 0
    total_correct = 0
    total_theta = 0.0

    for response in responses:
        question = question_lookup.get(response.question_id)
        if question is None:
            logger.debug(
                f"Skipping response to unknown question {response.question_id}"
            )
            continue
        resolved += 1
        total_theta += difficulty_to_theta(question.difficulty)
        if response.is_correct:
            total_correct += 1

    if resolved == 0:
        return 0.0

    avg_theta = total_theta / resolved
    correct_rate = total_correct / resolved
    adjustment = (correct_rate - 0.5) * CORRECT_RATE_SCALE

    return max(THETA_MIN, min(THETA_MAX, avg_theta + adjustment))


def calculate_standard_error(num_responses: int) -> float:
    """
    Standard error after num_responses answers.

    Strictly decreasing in num_responses until it reaches the 0.2 floor.

    Raises:
        ValueError: If num_responses is negative.
    """
    if num_responses < 0:
        raise ValueError(
            f"Number of responses must be non-negative, got {num_responses}"
        )
    return max(STANDARD_ERROR_FLOOR, 1.0 / math.sqrt(num_responses + 1))


def process_response(
    session: AdaptiveSession,
    question: CandidateQuestion,
    is_correct: bool,
    time_spent_seconds: float,
    question_lookup: Mapping[str, CandidateQuestion],
    student_answer: Optional[Any] = None,
    now: Optional[datetime] = None,
) -> AdaptiveSession:
    """
    Record an answer and update the session state.

    This function mutates the session in-place:
    - Appends the response to the history
    - Increments strand, format and difficulty exposure counters
    - Merges the question's standards (first-appearance order, no duplicates)
    - Re-estimates theta and SE over the full history
    - Stamps the last-update time

    Args:
        session: The session being updated (mutated in-place).
        question: The question that was answered.
        is_correct: Whether the answer was correct.
        time_spent_seconds: Time the examinee spent on the question.
        question_lookup: Question id -> metadata for every question that may
            appear in the history.
        student_answer: Raw answer; defaults to "correct"/"incorrect".
        now: Response time; defaults to the current UTC time.

    Returns:
        The same session, updated.

    Raises:
        SessionClosedError: If the session is already terminal.
        ValueError: If time_spent_seconds is negative.
    """
    session.ensure_open()
    if time_spent_seconds < 0:
        raise ValueError(
            f"time_spent_seconds must be non-negative, got {time_spent_seconds}"
        )

    timestamp = now or utc_now()
    response = QuestionResponse(
        question_id=question.id,
        student_answer=(
            student_answer
            if student_answer is not None
            else ("correct" if is_correct else "incorrect")
        ),
        is_correct=is_correct,
        time_spent_seconds=time_spent_seconds,
        timestamp=timestamp,
    )
    session.question_history.append(response)

    session.strands_touched[question.strand] = (
        session.strands_touched.get(question.strand, 0) + 1
    )
    format_key = question.format.value
    session.formats_used[format_key] = session.formats_used.get(format_key, 0) + 1
    difficulty_key = int(question.difficulty)
    session.difficulties_used[difficulty_key] = (
        session.difficulties_used.get(difficulty_key, 0) + 1
    )

    for standard in question.standards:
        if standard not in session.standards_covered:
            session.standards_covered.append(standard)

    session.current_ability_estimate = estimate_ability(
        session.question_history, question_lookup
    )
    session.standard_error = calculate_standard_error(session.num_questions)
    session.last_update_time = timestamp

    logger.debug(
        f"Session {session.id}: response #{session.num_questions} "
        f"(Q{question.id}, correct={is_correct}) -> "
        f"theta={session.current_ability_estimate:.3f}, "
        f"SE={session.standard_error:.3f}",
        extra={
            "student_id": session.student_id,
            "question_id": question.id,
            "theta": session.current_ability_estimate,
            "standard_error": session.standard_error,
            "num_questions": session.num_questions,
        },
    )

    return session
