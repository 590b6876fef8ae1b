"""Shared fakes for the live session tests.

The fakes stand in for the network: a transport that records what was sent
and lets tests inject lifecycle/data events, an API client with canned
answers, and request runners that resolve synchronously or on demand.
"""

from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication

from quiz_live.api.quiz_api_client import QuizApiError
from quiz_live.api.schemas import LeaderboardEntry, QuestionSummary
from quiz_live.core.monitoring_models import LiveMonitoringSnapshot
from quiz_live.core.services.connection_manager import ConnectionManager
from quiz_live.transport.base import Transport, TransportError


class FakeTransport(Transport):
    def __init__(self) -> None:
        super().__init__()
        self.sent: list[tuple[str, object]] = []
        self.open_calls = 0
        self.close_calls = 0
        self.connected = False

    def open(self) -> None:
        self.open_calls += 1

    def close(self) -> None:
        self.close_calls += 1
        self.connected = False

    def send(self, event_name: str, payload: object) -> None:
        if not self.connected:
            raise TransportError("not connected")
        self.sent.append((event_name, payload))

    def is_connected(self) -> bool:
        return self.connected

    # --- Test helpers ---

    def simulate_connect(self) -> None:
        self.connected = True
        self.lifecycle.emit("connect", None)

    def simulate_drop(self) -> None:
        self.connected = False
        self.lifecycle.emit("disconnect", "transport close")
        self.lifecycle.emit("reconnecting", None)
        self.lifecycle.emit("reconnect_attempt", 1)

    def deliver(self, event_name: str, payload: object) -> None:
        self.event_received.emit(event_name, payload)

    def sent_named(self, event_name: str) -> list[object]:
        return [payload for name, payload in self.sent if name == event_name]


class FakeApiClient:
    def __init__(self) -> None:
        self.leaderboard: list[LeaderboardEntry] = []
        self.duration_minutes = 60
        self.questions: list[QuestionSummary] = [QuestionSummary(question_id=1)]
        self.dashboard: LiveMonitoringSnapshot | None = None
        self.fail = False
        self.calls: list[str] = []

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail:
            raise QuizApiError(f"{name} failed")

    def get_leaderboard(self, quiz_id: int) -> list[LeaderboardEntry]:
        self._check("leaderboard")
        return list(self.leaderboard)

    def get_quiz_duration_minutes(self, quiz_id: int) -> int:
        self._check("duration")
        return self.duration_minutes

    def get_questions(self, quiz_id: int) -> list[QuestionSummary]:
        self._check("questions")
        return list(self.questions)

    def get_teacher_dashboard(self, quiz_id: int) -> LiveMonitoringSnapshot:
        self._check("dashboard")
        if self.dashboard is None:
            raise QuizApiError("no dashboard")
        return self.dashboard


class ImmediateRunner:
    """Runs each request inline and calls back before ``submit`` returns."""

    def submit(self, request, on_success, on_error) -> None:
        try:
            result = request()
        except Exception as exc:
            on_error(exc)
        else:
            on_success(result)


class DeferredRunner:
    """Holds requests until the test resolves them, to model in-flight fetches."""

    def __init__(self) -> None:
        self.pending: list[tuple] = []

    def submit(self, request, on_success, on_error) -> None:
        self.pending.append((request, on_success, on_error))

    def resolve_all(self) -> None:
        pending, self.pending = self.pending, []
        for request, on_success, on_error in pending:
            ImmediateRunner().submit(request, on_success, on_error)


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def connection(transport: FakeTransport) -> ConnectionManager:
    return ConnectionManager(transport)


@pytest.fixture
def connected(connection: ConnectionManager, transport: FakeTransport) -> ConnectionManager:
    connection.connect()
    transport.simulate_connect()
    return connection


@pytest.fixture
def api_client() -> FakeApiClient:
    return FakeApiClient()


@pytest.fixture
def runner() -> ImmediateRunner:
    return ImmediateRunner()


@pytest.fixture
def deferred_runner() -> DeferredRunner:
    return DeferredRunner()


def make_snapshot(quiz_id: int = 7, timestamp: float = 1.0, **overrides) -> dict:
    """Raw progressTrackingUpdate payload in the server's wire shape."""
    payload = {
        "quiz_id": quiz_id,
        "timestamp": timestamp,
        "participants_summary": {"total": 10, "active": 6, "completed": 4},
        "class_metrics": {
            "total_participants": 10,
            "avg_score": 72.4,
            "median_score": 75,
            "avg_accuracy": 68.2,
            "avg_response_time": 8400,
            "completion_rate": 40,
        },
        "struggling_students": {
            "count": 2,
            "students": [
                {
                    "user_id": 11,
                    "user_name": "Lan",
                    "risk_score": 0.91,
                    "risk_level": "critical",
                    "red_flags": [
                        {"type": "low_accuracy", "severity": "high", "description": "Accuracy 20%"}
                    ],
                    "suggested_actions": [
                        {"priority": 1, "action": "check_in", "description": "Talk to student"}
                    ],
                    "percentile": 5,
                },
                {
                    "user_id": "12",
                    "user_name": "Minh",
                    "risk_score": 0.6,
                    "risk_level": "high",
                    "percentile": 18,
                },
            ],
        },
        "current_question_analytics": None,
        "predictions": {
            "pass_rate_prediction": {
                "predicted_pass_rate": 64,
                "current_pass_rate": 60,
                "trend": "improving",
                "confidence": 0.7,
            },
            "completion_estimate": {"estimated_completion_minutes": 12, "confidence": 0.5},
            "score_distribution_prediction": {
                "excellent": {"count": 2, "percentage": 20},
                "good": {"count": 3, "percentage": 30},
                "average": {"count": 3, "percentage": 30},
                "poor": {"count": 2, "percentage": 20},
            },
        },
        "alerts": [],
    }
    payload.update(overrides)
    return payload
