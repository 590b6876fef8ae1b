"""Render-time formatting of monitoring values."""

from conftest import make_snapshot

from quiz_live.core import display
from quiz_live.core.models import PositionSnapshot, TimerState
from quiz_live.core.monitoring_models import LiveMonitoringSnapshot


def test_missing_values_render_as_not_available():
    assert display.format_percentage(None) == display.NOT_AVAILABLE
    assert display.format_milliseconds(None) == display.NOT_AVAILABLE
    assert display.format_seconds(None) == display.NOT_AVAILABLE


def test_response_time_units():
    assert display.format_milliseconds(8400) == "8s"
    assert display.format_seconds(8.44) == "8.4s"


def test_position():
    assert display.format_position(PositionSnapshot()) == "#-"
    assert display.format_position(PositionSnapshot(rank=3)) == "#3"
    assert display.format_position(PositionSnapshot(rank=3, total=12)) == "#3/12"


def test_timer():
    assert display.format_timer(TimerState(remaining_seconds=65, running=True)) == "01:05"
    assert display.format_timer(TimerState(remaining_seconds=65, running=False)) == "01:05 (paused)"


def test_snapshot_summary():
    snapshot = LiveMonitoringSnapshot.model_validate(make_snapshot())
    lines = display.summarize_snapshot(snapshot)

    assert lines[0] == "Participants: 10 total, 6 active, 4 completed"
    assert "accuracy 68%" in lines[1]
    assert "response 8s" in lines[1]
    assert lines[2] == "Struggling students: 2 (1 critical, 1 high)"
    assert lines[-1] == "Predicted pass rate 64% (improving)"


def test_summary_without_metrics():
    snapshot = LiveMonitoringSnapshot.model_validate(
        make_snapshot(class_metrics=None, struggling_students=None, predictions=None)
    )
    lines = display.summarize_snapshot(snapshot)

    assert lines[1] == "Class metrics: not available yet"
    assert lines[2] == "Struggling students: not available yet"
    assert len(lines) == 3


def test_participants_not_available():
    payload = make_snapshot()
    del payload["participants_summary"]
    snapshot = LiveMonitoringSnapshot.model_validate(payload)

    assert display.summarize_snapshot(snapshot)[0] == "Participants: not available yet"


def test_participants_without_completed_count():
    payload = make_snapshot(participants_summary=None)
    payload["progress_data"] = {"overall_metrics": {"total_participants": 4, "active_participants": 3}}
    snapshot = LiveMonitoringSnapshot.model_validate(payload)

    assert display.summarize_snapshot(snapshot)[0] == "Participants: 4 total, 3 active, n/a completed"
