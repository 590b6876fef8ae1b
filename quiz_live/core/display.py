"""Render-time formatting of monitoring values.

Nothing here is stored back into a snapshot; each call derives the text from
the raw values so display and data cannot drift apart. ``None`` means the
server has not computed the value yet and renders as ``NOT_AVAILABLE``,
never as zero.
"""

from __future__ import annotations

from quiz_live.core.models import PositionSnapshot, TimerState
from quiz_live.core.monitoring_models import (
    Alert,
    ClassMetrics,
    LiveMonitoringSnapshot,
    ParticipantsSummary,
    StrugglingStudents,
)

NOT_AVAILABLE = "n/a"


def format_percentage(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{round(value)}%"


def format_milliseconds(value: float | None) -> str:
    """Class-level response times arrive in milliseconds."""
    if value is None:
        return NOT_AVAILABLE
    return f"{round(value / 1000)}s"


def format_seconds(value: float | None) -> str:
    """Per-question response times arrive in seconds."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.1f}s"


def format_position(snapshot: PositionSnapshot) -> str:
    if snapshot.rank is None:
        return "#-"
    if snapshot.total is None:
        return f"#{snapshot.rank}"
    return f"#{snapshot.rank}/{snapshot.total}"


def format_timer(state: TimerState) -> str:
    suffix = "" if state.running else " (paused)"
    return f"{state.formatted}{suffix}"


def summarize_class_metrics(metrics: ClassMetrics | None) -> str:
    if metrics is None:
        return "Class metrics: not available yet"
    return (
        f"Class metrics: avg score {round(metrics.avg_score)}, "
        f"median {round(metrics.median_score)}, "
        f"accuracy {format_percentage(metrics.avg_accuracy)}, "
        f"response {format_milliseconds(metrics.avg_response_time)}, "
        f"completion {format_percentage(metrics.completion_rate)}"
    )


def summarize_struggling_students(struggling: StrugglingStudents | None) -> str:
    if struggling is None:
        return "Struggling students: not available yet"
    return (
        f"Struggling students: {struggling.count} "
        f"({struggling.critical_count} critical, {struggling.high_count} high)"
    )


def summarize_participants(participants: ParticipantsSummary | None) -> str:
    if participants is None:
        return "Participants: not available yet"
    completed = NOT_AVAILABLE if participants.completed is None else participants.completed
    return (
        f"Participants: {participants.total} total, {participants.active} active, "
        f"{completed} completed"
    )


def format_alert(alert: Alert) -> str:
    return f"[{alert.type.value.upper()}] P{alert.priority} {alert.title}: {alert.message}"


def summarize_snapshot(snapshot: LiveMonitoringSnapshot) -> list[str]:
    """Console-friendly lines describing a snapshot."""
    lines = [
        summarize_participants(snapshot.participants_summary),
        summarize_class_metrics(snapshot.class_metrics),
        summarize_struggling_students(snapshot.struggling_students),
    ]
    analytics = snapshot.current_question_analytics
    if analytics is not None:
        stats = analytics.live_stats
        lines.append(
            f"Question {analytics.question_id}: {stats.answered_count} answered, "
            f"{format_percentage(stats.current_correct_rate)} correct, "
            f"avg {format_seconds(stats.avg_response_time)}"
        )
    if snapshot.predictions is not None:
        prediction = snapshot.predictions.pass_rate_prediction
        lines.append(
            f"Predicted pass rate {format_percentage(prediction.predicted_pass_rate)} "
            f"({prediction.trend.value})"
        )
    return lines
