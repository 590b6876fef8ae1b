"""Service folding the class-wide analytics stream into one dashboard snapshot."""

from __future__ import annotations

from collections import deque
import logging
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QTimer, Signal

from quiz_live.constants import event_names
from quiz_live.constants.quiz_constants import (
    MAX_MONITOR_NOTIFICATIONS,
    MONITOR_REFRESH_INTERVAL_MS,
)
from quiz_live.core.events import NewParticipant, ParticipantLeft, ProgressTrackingUpdate
from quiz_live.core.models import Role
from quiz_live.core.monitoring_models import Alert, LiveMonitoringSnapshot
from quiz_live.core.services.connection_manager import ConnectionManager, Subscription
from quiz_live.core.services.room_membership import RoomMembershipController

if TYPE_CHECKING:
    from quiz_live.api.quiz_api_client import QuizApiClient
    from quiz_live.core.services.request_runner import RequestRunner

logger = logging.getLogger(__name__)


def sort_alerts(alerts: tuple[Alert, ...] | list[Alert]) -> tuple[Alert, ...]:
    """Most urgent first (ascending priority); the input is left untouched."""
    return tuple(sorted(alerts, key=lambda alert: alert.priority))


class LiveMonitorAggregator(QObject):
    """Latest full monitoring snapshot for one quiz.

    Every ``progressTrackingUpdate`` replaces the snapshot wholesale; no
    field survives from an earlier update. Dashboard fetches (initial and
    periodic fallback) only replace the snapshot if they are not older than
    what the push stream already delivered.
    """

    snapshot_changed = Signal(object)
    notifications_changed = Signal(list)

    def __init__(
        self,
        quiz_id: int,
        connection: ConnectionManager,
        rooms: RoomMembershipController,
        api_client: QuizApiClient | None = None,
        runner: RequestRunner | None = None,
        refresh_interval_ms: int = MONITOR_REFRESH_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._quiz_id = quiz_id
        self._connection = connection
        self._rooms = rooms
        self._api_client = api_client
        self._runner = runner

        self._snapshot: LiveMonitoringSnapshot | None = None
        self._sorted_alerts: tuple[Alert, ...] = ()
        self._notifications: deque[str] = deque(maxlen=MAX_MONITOR_NOTIFICATIONS)
        self._subscriptions: list[Subscription] = []
        self._open = False

        self._refresh_timer = QTimer(self)
        self._refresh_timer.setInterval(refresh_interval_ms)
        self._refresh_timer.timeout.connect(self.refresh)

    # --- Accessors ---

    @property
    def snapshot(self) -> LiveMonitoringSnapshot | None:
        return self._snapshot

    @property
    def sorted_alerts(self) -> tuple[Alert, ...]:
        return self._sorted_alerts

    @property
    def notifications(self) -> list[str]:
        return list(self._notifications)

    @property
    def is_open(self) -> bool:
        return self._open

    # --- Lifecycle ---

    def open(self) -> None:
        if self._open:
            return
        self._open = True
        self._rooms.join_role_room(self._quiz_id, Role.TEACHER)
        key = f"quiz_monitor_{self._quiz_id}_{id(self)}"
        self._subscriptions = [
            self._connection.subscribe(
                event_names.PROGRESS_TRACKING_UPDATE, self._handle_progress_update, key=key
            ),
            self._connection.subscribe(
                event_names.NEW_PARTICIPANT, self._handle_new_participant, key=key
            ),
            self._connection.subscribe(
                event_names.PARTICIPANT_LEFT, self._handle_participant_left, key=key
            ),
        ]
        if self._api_client is not None and self._runner is not None:
            self.refresh()
            self._refresh_timer.start()

    def close(self) -> None:
        self._open = False
        self._refresh_timer.stop()
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions = []

    def refresh(self) -> None:
        """Pull the dashboard once; used at open and as the periodic fallback."""
        if not self._open or self._api_client is None or self._runner is None:
            return
        api_client = self._api_client
        quiz_id = self._quiz_id
        self._runner.submit(
            lambda: api_client.get_teacher_dashboard(quiz_id),
            self._apply_pulled_snapshot,
            self._handle_fetch_error,
        )

    # --- Updates ---

    def apply_update(self, snapshot: LiveMonitoringSnapshot) -> None:
        """Replace the current snapshot with a pushed one."""
        if snapshot.quiz_id != self._quiz_id:
            return
        self._replace(snapshot)

    def clear_notifications(self) -> None:
        self._notifications.clear()
        self.notifications_changed.emit([])

    def _replace(self, snapshot: LiveMonitoringSnapshot) -> None:
        self._snapshot = snapshot
        self._sorted_alerts = sort_alerts(snapshot.alerts)
        self.snapshot_changed.emit(snapshot)

    def _apply_pulled_snapshot(self, snapshot: LiveMonitoringSnapshot) -> None:
        if not self._open or snapshot.quiz_id != self._quiz_id:
            return
        current = self._snapshot
        if current is not None and snapshot.timestamp < current.timestamp:
            logger.debug("Discarding dashboard fetch older than pushed snapshot")
            return
        self._replace(snapshot)

    def _handle_fetch_error(self, exc: Exception) -> None:
        logger.warning("Dashboard fetch for quiz %s failed: %s", self._quiz_id, exc)

    def _handle_progress_update(self, event: ProgressTrackingUpdate) -> None:
        self.apply_update(event.snapshot)

    def _handle_new_participant(self, event: NewParticipant) -> None:
        if event.quiz_id is not None and event.quiz_id != self._quiz_id:
            return
        self._push_notification(f"{event.participant.name} joined the quiz")
        self.refresh()

    def _handle_participant_left(self, event: ParticipantLeft) -> None:
        if event.quiz_id is not None and event.quiz_id != self._quiz_id:
            return
        self._push_notification(f"{event.participant.name} left the quiz")

    def _push_notification(self, message: str) -> None:
        logger.info(message)
        self._notifications.appendleft(message)
        self.notifications_changed.emit(list(self._notifications))
