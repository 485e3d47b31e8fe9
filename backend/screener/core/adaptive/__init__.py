"""
Adaptive testing utilities for the screener.

This module provides ability estimation, question selection, stopping rules
and session orchestration for grade-level adaptive screeners.
"""

from .ability_estimation import (
    calculate_standard_error,
    estimate_ability,
    process_response,
)
from .ability_model import (
    ConfidenceInterval,
    ability_confidence_interval,
    ability_to_percentile,
    difficulty_to_theta,
    erf,
    theta_to_performance_level,
)
from .content_balancing import (
    get_required_strands,
    get_underrepresented_strands,
    required_strand_coverage,
)
from .engine import (
    AdaptiveSessionManager,
    AdaptiveStepResult,
)
from .exceptions import (
    AdaptiveTestingError,
    SessionClosedError,
)
from .item_selection import (
    SelectionResult,
    select_next_question,
)
from .score_conversion import (
    ScreenerResult,
    StandardPerformance,
    build_screener_result,
)
from .session import (
    AdaptiveSession,
    QuestionResponse,
    abandon_session,
    create_session,
    finalize_session,
    is_time_limit_exceeded,
    time_out_session,
)
from .stopping_rules import (
    TerminationCriteria,
    TerminationDecision,
    should_terminate,
)

__all__ = [
    "AdaptiveSession",
    "QuestionResponse",
    "create_session",
    "finalize_session",
    "abandon_session",
    "time_out_session",
    "is_time_limit_exceeded",
    "estimate_ability",
    "calculate_standard_error",
    "process_response",
    "difficulty_to_theta",
    "theta_to_performance_level",
    "erf",
    "ability_to_percentile",
    "ability_confidence_interval",
    "ConfidenceInterval",
    "get_required_strands",
    "get_underrepresented_strands",
    "required_strand_coverage",
    "select_next_question",
    "SelectionResult",
    "should_terminate",
    "TerminationCriteria",
    "TerminationDecision",
    "AdaptiveSessionManager",
    "AdaptiveStepResult",
    "build_screener_result",
    "ScreenerResult",
    "StandardPerformance",
    "AdaptiveTestingError",
    "SessionClosedError",
]
