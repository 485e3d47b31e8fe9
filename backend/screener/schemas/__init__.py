"""
Pydantic schemas for adaptive session persistence and transport.
"""
from .adaptive import (
    AdaptiveSessionSchema,
    QuestionResponseSchema,
    ScreenerResultSchema,
    SelectionResultSchema,
    StandardPerformanceSchema,
    TerminationDecisionSchema,
)

__all__ = [
    "AdaptiveSessionSchema",
    "QuestionResponseSchema",
    "ScreenerResultSchema",
    "SelectionResultSchema",
    "StandardPerformanceSchema",
    "TerminationDecisionSchema",
]
