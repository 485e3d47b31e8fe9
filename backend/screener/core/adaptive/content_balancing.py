"""
Strand coverage for the adaptive screener.

Each subject has a fixed list of required content strands. Item selection
gives a bonus to questions from strands that have not yet been asked
MIN_QUESTIONS_PER_STRAND times, and the termination evaluator refuses to stop
early until enough required strands reach that minimum.

Bonus tiers:
    Required strand below the minimum:    1.0 - 0.3 * prior exposures
    Any other strand below the minimum:   0.5
    Strand at or above the minimum:       0.0

Subjects without a configured strand list have no required strands, which
relaxes (never blocks) termination.
"""

import logging
from typing import Dict, List, Mapping

logger = logging.getLogger(__name__)

# Minimum questions per strand before it counts as covered
MIN_QUESTIONS_PER_STRAND = 2

REQUIRED_STRAND_BONUS = 1.0
REQUIRED_STRAND_BONUS_DECAY = 0.3  # Subtracted per prior exposure
OPTIONAL_STRAND_BONUS = 0.5

REQUIRED_STRANDS_BY_SUBJECT: Dict[str, List[str]] = {
    "Mathematics": [
        "Operations & Algebraic Thinking",
        "Number & Operations in Base Ten",
        "Number & Operations - Fractions",
        "Measurement & Data",
        "Geometry",
    ],
    "Math": [
        "Operations & Algebraic Thinking",
        "Number & Operations in Base Ten",
        "Measurement & Data",
        "Geometry",
    ],
    "Reading": [
        "Key Ideas & Details",
        "Craft & Structure",
        "Integration of Knowledge",
    ],
    "Reading Comprehension": [
        "Key Ideas & Details",
        "Craft & Structure",
        "Integration of Knowledge",
    ],
    "ELA": [
        "Key Ideas & Details",
        "Craft & Structure",
        "Integration of Knowledge",
        "Phonics & Word Recognition",
    ],
}


def get_required_strands(subject: str) -> List[str]:
    """
    Return the required strands for a subject.

    Unknown subjects return an empty list.
    """
    return list(REQUIRED_STRANDS_BY_SUBJECT.get(subject, []))


def get_underrepresented_strands(
    subject: str,
    strands_touched: Mapping[str, int],
    min_questions_per_strand: int = MIN_QUESTIONS_PER_STRAND,
) -> List[str]:
    """
    Required strands that have fewer than the minimum number of exposures.

    Args:
        subject: Session subject.
        strands_touched: Strand -> count of questions asked so far.
        min_questions_per_strand: Coverage minimum per strand.

    Returns:
        Required strands below the minimum, in table order.
    """
    return [
        strand
        for strand in get_required_strands(subject)
        if strands_touched.get(strand, 0) < min_questions_per_strand
    ]


def count_covered_required_strands(
    subject: str,
    strands_touched: Mapping[str, int],
    min_questions_per_strand: int = MIN_QUESTIONS_PER_STRAND,
) -> int:
    """Number of required strands that reached the per-strand minimum."""
    return sum(
        1
        for strand in get_required_strands(subject)
        if strands_touched.get(strand, 0) >= min_questions_per_strand
    )


def required_strand_coverage(
    subject: str,
    strands_touched: Mapping[str, int],
    min_questions_per_strand: int = MIN_QUESTIONS_PER_STRAND,
) -> float:
    """
    Fraction of the subject's required strands that reached the minimum.

    Returns 1.0 when the subject has no required strands.
    """
    required = get_required_strands(subject)
    if not required:
        return 1.0
    covered = count_covered_required_strands(
        subject, strands_touched, min_questions_per_strand
    )
    return covered / len(required)


def strand_bonus(
    strand: str,
    strands_touched: Mapping[str, int],
    underrepresented: List[str],
    min_questions_per_strand: int = MIN_QUESTIONS_PER_STRAND,
) -> float:
    """
    Content-balance bonus for a candidate question's strand.

    Args:
        strand: The candidate's strand.
        strands_touched: Strand -> count of questions asked so far.
        underrepresented: Output of get_underrepresented_strands.
        min_questions_per_strand: Coverage minimum per strand.

    Returns:
        Bonus added to the ability-match information value.
    """
    usage = strands_touched.get(strand, 0)
    if strand in underrepresented:
        return REQUIRED_STRAND_BONUS - usage * REQUIRED_STRAND_BONUS_DECAY
    if usage < min_questions_per_strand:
        return OPTIONAL_STRAND_BONUS
    return 0.0
