"""Facades wiring the live services together for one student or teacher view."""

from __future__ import annotations

import logging

from quiz_live.api.quiz_api_client import QuizApiClient
from quiz_live.api.schemas import QuestionSummary
from quiz_live.constants import event_names
from quiz_live.core.events import QuizCompleted
from quiz_live.core.identity import UserId
from quiz_live.core.models import PositionSnapshot, Role, TimerState
from quiz_live.core.monitoring_models import Alert, LiveMonitoringSnapshot
from quiz_live.core.services.connection_manager import ConnectionManager, Subscription
from quiz_live.core.services.live_monitor import LiveMonitorAggregator
from quiz_live.core.services.position_tracker import PositionTracker
from quiz_live.core.services.request_runner import RequestRunner
from quiz_live.core.services.room_membership import RoomMembershipController
from quiz_live.core.services.session_timer import SessionTimer

logger = logging.getLogger(__name__)


class StudentQuizSession:
    """Facade for a student's live attempt: rooms, countdown and rank."""

    def __init__(
        self,
        quiz_id: int,
        user_id: UserId,
        connection: ConnectionManager,
        api_client: QuizApiClient,
        runner: RequestRunner,
        duration_minutes: int | None = None,
    ) -> None:
        self.quiz_id = quiz_id
        self.user_id = user_id
        self._connection = connection
        self._api_client = api_client
        self._runner = runner
        self._duration_minutes = duration_minutes

        self.rooms = RoomMembershipController(connection)
        self.timer = SessionTimer(quiz_id, api_client=api_client, runner=runner)
        self.position = PositionTracker(quiz_id, user_id, connection, api_client, runner)
        self._completed_subscription: Subscription | None = None
        self._completed = False

    # --- Lifecycle ---

    def open(self) -> None:
        self._connection.connect()
        self.rooms.join_all(self.quiz_id, Role.STUDENT, self.user_id)
        self.position.start()
        self._completed_subscription = self._connection.subscribe(
            event_names.QUIZ_COMPLETED, self._handle_quiz_completed
        )
        self.timer.start(duration_minutes=self._duration_minutes)
        self._load_questions()

    def close(self) -> None:
        """Stop ticking and drop every subscription this session registered."""
        self.timer.stop()
        self.position.close()
        if self._completed_subscription is not None:
            self._completed_subscription.dispose()
            self._completed_subscription = None
        self.rooms.close()

    # --- Timer Delegation ---

    def timer_state(self) -> TimerState:
        return self.timer.state()

    def resume_time_left(self, remaining_seconds: int) -> None:
        """Apply a saved or server-provided remaining time to the running attempt."""
        self.timer.reconcile(remaining_seconds)

    def is_completed(self) -> bool:
        return self._completed

    # --- Position Delegation ---

    def position_snapshot(self) -> PositionSnapshot:
        return self.position.snapshot

    def refresh_position(self) -> bool:
        return self.position.update_position()

    # --- Internals ---

    def _load_questions(self) -> None:
        api_client = self._api_client
        quiz_id = self.quiz_id
        self._runner.submit(
            lambda: api_client.get_questions(quiz_id),
            self._handle_questions,
            lambda exc: logger.warning("Could not load questions for quiz %s: %s", quiz_id, exc),
        )

    def _handle_questions(self, questions: list[QuestionSummary]) -> None:
        # Ranking only means something once the quiz has questions.
        if questions:
            self.position.update_position()

    def _handle_quiz_completed(self, event: QuizCompleted) -> None:
        if event.quiz_id != self.quiz_id:
            return
        logger.info("Quiz %s completed (final score %s)", self.quiz_id, event.final_score)
        self._completed = True
        self.timer.stop()
        self.position.update_position()


class TeacherMonitorSession:
    """Facade for a teacher's live monitoring view of one quiz."""

    def __init__(
        self,
        quiz_id: int,
        connection: ConnectionManager,
        api_client: QuizApiClient | None = None,
        runner: RequestRunner | None = None,
    ) -> None:
        self.quiz_id = quiz_id
        self._connection = connection
        self.rooms = RoomMembershipController(connection)
        self.monitor = LiveMonitorAggregator(
            quiz_id, connection, self.rooms, api_client=api_client, runner=runner
        )

    def open(self) -> None:
        self._connection.connect()
        self.rooms.join_quiz_room(self.quiz_id)
        self.monitor.open()

    def close(self) -> None:
        self.monitor.close()
        self.rooms.close()

    # --- Monitor Delegation ---

    def snapshot(self) -> LiveMonitoringSnapshot | None:
        return self.monitor.snapshot

    def alerts(self) -> tuple[Alert, ...]:
        return self.monitor.sorted_alerts

    def notifications(self) -> list[str]:
        return self.monitor.notifications

    def clear_notifications(self) -> None:
        self.monitor.clear_notifications()

    def refresh(self) -> None:
        self.monitor.refresh()
