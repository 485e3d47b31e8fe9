"""Pydantic schemas for persisting and transporting adaptive screener state."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from screener.core.adaptive.item_selection import SelectionResult
from screener.core.adaptive.score_conversion import ScreenerResult
from screener.core.adaptive.session import AdaptiveSession, QuestionResponse
from screener.core.adaptive.stopping_rules import TerminationDecision
from screener.models.enums import (
    DifficultyLevel,
    PerformanceLevel,
    QuestionFormat,
    ScreenerLevel,
    SessionStatus,
)


class QuestionResponseSchema(BaseModel):
    """One recorded answer."""

    question_id: str
    student_answer: Any = None
    is_correct: bool
    time_spent_seconds: float = Field(..., ge=0)
    timestamp: datetime

    model_config = {"from_attributes": True}

    def to_response(self) -> QuestionResponse:
        return QuestionResponse(
            question_id=self.question_id,
            student_answer=self.student_answer,
            is_correct=self.is_correct,
            time_spent_seconds=self.time_spent_seconds,
            timestamp=self.timestamp,
        )


class AdaptiveSessionSchema(BaseModel):
    """Full session snapshot; converts to and from AdaptiveSession losslessly."""

    id: str
    student_id: str
    subject: str
    grade_level: str
    current_ability_estimate: float
    standard_error: float
    start_time: datetime
    last_update_time: datetime
    status: SessionStatus = SessionStatus.IN_PROGRESS
    question_history: List[QuestionResponseSchema] = Field(default_factory=list)
    strands_touched: Dict[str, int] = Field(default_factory=dict)
    formats_used: Dict[str, int] = Field(default_factory=dict)
    # JSON object keys arrive as strings; pydantic coerces them back to int
    difficulties_used: Dict[int, int] = Field(default_factory=dict)
    standards_covered: List[str] = Field(default_factory=list)
    final_ability_estimate: Optional[float] = None
    final_standard_error: Optional[float] = None
    total_questions_answered: Optional[int] = None
    total_correct: Optional[int] = None
    completion_time: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_session(cls, session: AdaptiveSession) -> "AdaptiveSessionSchema":
        return cls.model_validate(session)

    def to_session(self) -> AdaptiveSession:
        return AdaptiveSession(
            id=self.id,
            student_id=self.student_id,
            subject=self.subject,
            grade_level=self.grade_level,
            current_ability_estimate=self.current_ability_estimate,
            standard_error=self.standard_error,
            start_time=self.start_time,
            last_update_time=self.last_update_time,
            status=self.status,
            question_history=[r.to_response() for r in self.question_history],
            strands_touched=dict(self.strands_touched),
            formats_used=dict(self.formats_used),
            difficulties_used=dict(self.difficulties_used),
            standards_covered=list(self.standards_covered),
            final_ability_estimate=self.final_ability_estimate,
            final_standard_error=self.final_standard_error,
            total_questions_answered=self.total_questions_answered,
            total_correct=self.total_correct,
            completion_time=self.completion_time,
        )


class SelectionResultSchema(BaseModel):
    """The question chosen for the examinee and why."""

    question_id: str
    strand: str
    format: QuestionFormat
    difficulty: DifficultyLevel
    grade_level: str
    information_value: float
    selection_reason: str
    alternatives_considered: int
    content_balance_score: float

    @classmethod
    def from_result(cls, result: SelectionResult) -> "SelectionResultSchema":
        question = result.selected_question
        return cls(
            question_id=question.id,
            strand=question.strand,
            format=question.format,
            difficulty=question.difficulty,
            grade_level=question.grade_level,
            information_value=result.information_value,
            selection_reason=result.selection_reason,
            alternatives_considered=result.alternatives_considered,
            content_balance_score=result.content_balance_score,
        )


class TerminationDecisionSchema(BaseModel):
    """Stopping-rule outcome with diagnostics."""

    should_stop: bool
    reason: str
    details: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"from_attributes": True}

    @classmethod
    def from_decision(cls, decision: TerminationDecision) -> "TerminationDecisionSchema":
        return cls.model_validate(decision)


class StandardPerformanceSchema(BaseModel):
    """Attempts and correct answers for one standard."""

    standard: str
    strand: str
    attempted: int = Field(..., ge=0)
    correct: int = Field(..., ge=0)

    model_config = {"from_attributes": True}


class ScreenerResultSchema(BaseModel):
    """Dashboard report for a scored session."""

    session_id: str
    student_id: str
    subject: str
    grade_level: str
    status: SessionStatus
    theta: float
    standard_error: float
    ci_lower: float
    ci_upper: float
    ci_level: float
    percentile: int = Field(..., ge=1, le=99)
    performance_level: PerformanceLevel
    screener_level: ScreenerLevel
    questions_answered: int
    correct_count: int
    duration_minutes: float
    strand_scores: Dict[str, int] = Field(default_factory=dict)
    standards_performance: List[StandardPerformanceSchema] = Field(
        default_factory=list
    )

    @classmethod
    def from_result(cls, result: ScreenerResult) -> "ScreenerResultSchema":
        return cls(
            session_id=result.session_id,
            student_id=result.student_id,
            subject=result.subject,
            grade_level=result.grade_level,
            status=result.status,
            theta=result.theta,
            standard_error=result.standard_error,
            ci_lower=result.confidence_interval.lower,
            ci_upper=result.confidence_interval.upper,
            ci_level=result.confidence_interval.level,
            percentile=result.percentile,
            performance_level=result.performance_level,
            screener_level=result.screener_level,
            questions_answered=result.questions_answered,
            correct_count=result.correct_count,
            duration_minutes=result.duration_minutes,
            strand_scores=dict(result.strand_scores),
            standards_performance=[
                StandardPerformanceSchema.model_validate(p)
                for p in result.standards_performance
            ],
        )
