"""Service reconciling the local user's leaderboard rank from pull and push."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, Signal

from quiz_live.constants import event_names
from quiz_live.core.events import UserPositionUpdate
from quiz_live.core.identity import UserId, normalize_user_id, same_user
from quiz_live.core.models import PositionSnapshot
from quiz_live.core.services.connection_manager import ConnectionManager, Subscription

if TYPE_CHECKING:
    from quiz_live.api.quiz_api_client import QuizApiClient
    from quiz_live.api.schemas import LeaderboardEntry
    from quiz_live.core.services.request_runner import RequestRunner

logger = logging.getLogger(__name__)


def find_rank(leaderboard: list[LeaderboardEntry], user_id: UserId) -> int | None:
    """1-based rank of ``user_id`` in an ordered leaderboard, or None if absent."""
    for index, entry in enumerate(leaderboard):
        if same_user(user_id, entry.user_id):
            return index + 1
    return None


class PositionTracker(QObject):
    """Keeps ``{rank, total}`` for one (quiz, user) pair.

    Two producers write the snapshot: :meth:`update_position` (a full
    leaderboard fetch) and ``userPositionUpdate`` push events. Both carry
    server truth, so the last write wins. A user missing from a fetched
    leaderboard leaves the previous values in place.
    """

    position_changed = Signal(object)
    notification = Signal(str)

    def __init__(
        self,
        quiz_id: int,
        user_id: UserId | None,
        connection: ConnectionManager,
        api_client: QuizApiClient,
        runner: RequestRunner,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._quiz_id = quiz_id
        self._user_id = normalize_user_id(user_id)
        self._connection = connection
        self._api_client = api_client
        self._runner = runner
        self._snapshot = PositionSnapshot()
        self._subscription: Subscription | None = None
        self._closed = False

    @property
    def snapshot(self) -> PositionSnapshot:
        return self._snapshot

    @property
    def rank(self) -> int | None:
        return self._snapshot.rank

    @property
    def total(self) -> int | None:
        return self._snapshot.total

    def start(self) -> None:
        self._closed = False
        if self._subscription is not None:
            return
        self._subscription = self._connection.subscribe(
            event_names.USER_POSITION_UPDATE,
            self._handle_position_event,
            key=f"quiz-live-{self._quiz_id}-{self._user_id}",
        )

    def close(self) -> None:
        self._closed = True
        if self._subscription is not None:
            self._subscription.dispose()
            self._subscription = None

    def update_position(self) -> bool:
        """Fetch the leaderboard and look up our rank; False if no request was made."""
        if self._user_id is None:
            return False
        quiz_id = self._quiz_id
        api_client = self._api_client
        self._runner.submit(
            lambda: api_client.get_leaderboard(quiz_id),
            self._apply_leaderboard,
            self._handle_fetch_error,
        )
        return True

    def _apply_leaderboard(self, leaderboard: list[LeaderboardEntry]) -> None:
        if self._closed:
            return
        rank = find_rank(leaderboard, self._user_id)
        if rank is None:
            # Keep the last known rank.
            logger.debug("User %s not on quiz %s leaderboard yet", self._user_id, self._quiz_id)
            return
        self._set_snapshot(PositionSnapshot(rank=rank, total=len(leaderboard)))

    def _handle_fetch_error(self, exc: Exception) -> None:
        logger.warning("Leaderboard fetch for quiz %s failed: %s", self._quiz_id, exc)

    def _handle_position_event(self, event: UserPositionUpdate) -> None:
        if event.quiz_id is not None and event.quiz_id != self._quiz_id:
            return
        if not same_user(self._user_id, event.user_id):
            return
        snapshot = PositionSnapshot(rank=event.position, total=event.total_participants)
        if self._set_snapshot(snapshot):
            self.notification.emit(f"Current position: #{snapshot.rank}/{snapshot.total}")

    def _set_snapshot(self, snapshot: PositionSnapshot) -> bool:
        if snapshot == self._snapshot:
            return False
        self._snapshot = snapshot
        self.position_changed.emit(snapshot)
        return True
