"""Typed shape of the live monitoring snapshot pushed to teacher dashboards.

The backend computes the whole aggregate and emits it in one piece, so these
models describe a complete snapshot. Sub-structures the server has not
computed yet arrive as ``null`` and stay ``None`` here; consumers must render
"not available yet" rather than zeros.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class AlertType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class QuizInfo(_SnapshotModel):
    quiz_id: int
    name: str = ""
    status: str = ""
    total_questions: int = 0
    course: str | None = None


class ParticipantsSummary(_SnapshotModel):
    total: int = 0
    active: int = 0
    completed: int | None = 0


class ClassMetrics(_SnapshotModel):
    total_participants: int = 0
    avg_score: float
    median_score: float
    avg_accuracy: float
    avg_response_time: float
    completion_rate: float


class RedFlag(_SnapshotModel):
    type: str
    severity: str
    description: str
    value: float | None = None
    threshold: float | None = None


class SuggestedAction(_SnapshotModel):
    priority: int
    action: str
    description: str = ""
    reason: str = ""


class CurrentStats(_SnapshotModel):
    score: float = 0
    accuracy: float = 0
    questions_answered: int = 0
    correct_answers: int = 0
    avg_response_time: float = 0


class StrugglingStudent(_SnapshotModel):
    user_id: str
    user_name: str = ""
    risk_score: float
    risk_level: RiskLevel
    current_stats: CurrentStats | None = None
    red_flags: tuple[RedFlag, ...] = ()
    suggested_actions: tuple[SuggestedAction, ...] = ()
    percentile: float | None = None

    @field_validator("user_id", mode="before")
    @classmethod
    def _stringify_user_id(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value


class StrugglingStudents(_SnapshotModel):
    count: int = 0
    students: tuple[StrugglingStudent, ...] = ()

    @property
    def critical_count(self) -> int:
        return sum(1 for student in self.students if student.risk_level is RiskLevel.CRITICAL)

    @property
    def high_count(self) -> int:
        return sum(1 for student in self.students if student.risk_level is RiskLevel.HIGH)


class AnswerChoiceBreakdown(_SnapshotModel):
    answer_id: int
    answer_text: str | None = None
    percentage: float
    is_correct: bool


class LiveStats(_SnapshotModel):
    answered_count: int = 0
    current_correct_rate: float = 0
    avg_response_time: float = 0
    answer_choice_breakdown: tuple[AnswerChoiceBreakdown, ...] = ()


class CommonMisconception(_SnapshotModel):
    detected: bool = False
    description: str | None = None


class QuestionInsights(_SnapshotModel):
    difficulty_assessment: str = ""
    common_misconception: CommonMisconception = Field(default_factory=CommonMisconception)
    teaching_suggestion: str = ""


class StudentSegment(_SnapshotModel):
    segment_name: str
    count: int
    percentage: float


class CurrentQuestionAnalytics(_SnapshotModel):
    question_id: int
    question_text: str = ""
    live_stats: LiveStats
    insights: QuestionInsights | None = None
    student_segments: tuple[StudentSegment, ...] | None = None


class PassRatePrediction(_SnapshotModel):
    predicted_pass_rate: float
    current_pass_rate: float
    trend: Trend
    confidence: float


class CompletionEstimate(_SnapshotModel):
    estimated_completion_minutes: float
    confidence: float


class ScoreBucket(_SnapshotModel):
    count: int = 0
    percentage: float = 0


class ScoreDistribution(_SnapshotModel):
    excellent: ScoreBucket = Field(default_factory=ScoreBucket)
    good: ScoreBucket = Field(default_factory=ScoreBucket)
    average: ScoreBucket = Field(default_factory=ScoreBucket)
    poor: ScoreBucket = Field(default_factory=ScoreBucket)


class Predictions(_SnapshotModel):
    pass_rate_prediction: PassRatePrediction
    completion_estimate: CompletionEstimate
    score_distribution_prediction: ScoreDistribution = Field(default_factory=ScoreDistribution)


class Alert(_SnapshotModel):
    type: AlertType
    category: str
    title: str
    message: str
    priority: int


class LiveMonitoringSnapshot(_SnapshotModel):
    """Complete monitoring aggregate for one quiz at one point in time."""

    quiz_id: int
    timestamp: float = 0
    quiz_info: QuizInfo | None = None
    participants_summary: ParticipantsSummary | None = None
    class_metrics: ClassMetrics | None = None
    struggling_students: StrugglingStudents | None = None
    current_question_analytics: CurrentQuestionAnalytics | None = None
    predictions: Predictions | None = None
    alerts: tuple[Alert, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _summary_from_progress_data(cls, data: object) -> object:
        # Pushed updates carry the counts under progress_data.overall_metrics.
        if not isinstance(data, dict) or data.get("participants_summary") is not None:
            return data
        progress = data.get("progress_data")
        if not isinstance(progress, dict):
            return data
        overall = progress.get("overall_metrics")
        if not isinstance(overall, dict):
            return data
        participants = progress.get("participants_summary")
        completed = None
        if isinstance(participants, list):
            completed = sum(
                1
                for participant in participants
                if isinstance(participant, dict) and participant.get("status") == "completed"
            )
        return {
            **data,
            "participants_summary": {
                "total": overall.get("total_participants", 0),
                "active": overall.get("active_participants", 0),
                "completed": completed,
            },
        }

    @field_validator("struggling_students", mode="before")
    @classmethod
    def _accept_bare_student_list(cls, value: object) -> object:
        # Older servers send the students as a bare list.
        if isinstance(value, list):
            return {"count": len(value), "students": value}
        return value

    @field_validator("alerts", mode="before")
    @classmethod
    def _null_alerts_as_empty(cls, value: object) -> object:
        return () if value is None else value
