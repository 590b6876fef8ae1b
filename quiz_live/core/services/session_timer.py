"""Service for the per-attempt quiz countdown."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QTimer, Signal

from quiz_live.constants.quiz_constants import (
    DEFAULT_QUIZ_DURATION_SECONDS,
    TIMER_TICK_INTERVAL_MS,
)
from quiz_live.core.models import TimerPhase, TimerState, format_time

if TYPE_CHECKING:
    from quiz_live.api.quiz_api_client import QuizApiClient
    from quiz_live.core.services.request_runner import RequestRunner

logger = logging.getLogger(__name__)


class SessionTimer(QObject):
    """Authoritative countdown for one quiz attempt.

    ``idle -> running -> expired``; :meth:`reconcile` overwrites the remaining
    time of a running attempt without leaving its phase, or starts an attempt
    whose duration is still being fetched. ``time_up`` fires at most once
    per started attempt.
    """

    time_changed = Signal(int)
    time_up = Signal()

    def __init__(
        self,
        quiz_id: int,
        api_client: QuizApiClient | None = None,
        runner: RequestRunner | None = None,
        on_time_change: Callable[[int], None] | None = None,
        on_time_up: Callable[[], None] | None = None,
        tick_interval_ms: int = TIMER_TICK_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._quiz_id = quiz_id
        self._api_client = api_client
        self._runner = runner

        self._remaining_seconds = 0
        self._phase = TimerPhase.IDLE
        self._enabled = True
        self._expiry_fired = False
        # Bumped on start/stop so a late duration fetch cannot restart a stale attempt.
        self._generation = 0
        self._fetch_pending = False

        self._ticker = QTimer(self)
        self._ticker.setInterval(tick_interval_ms)
        self._ticker.timeout.connect(self.tick)

        if on_time_change is not None:
            self.time_changed.connect(on_time_change)
        if on_time_up is not None:
            self.time_up.connect(on_time_up)

    # --- Accessors ---

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def phase(self) -> TimerPhase:
        return self._phase

    @property
    def running(self) -> bool:
        return self._phase is TimerPhase.RUNNING

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def fetch_pending(self) -> bool:
        return self._fetch_pending

    def state(self) -> TimerState:
        return TimerState(remaining_seconds=self._remaining_seconds, running=self.running)

    @staticmethod
    def format(seconds: int) -> str:
        return format_time(seconds)

    # --- Control ---

    def start(
        self,
        initial_seconds: int | None = None,
        duration_minutes: int | None = None,
    ) -> None:
        """Start the attempt, fetching the quiz duration when none is supplied."""
        self._generation += 1
        if initial_seconds is None and duration_minutes is not None:
            initial_seconds = duration_minutes * 60
        if initial_seconds is not None:
            self._begin(initial_seconds)
            return

        if self._api_client is None or self._runner is None:
            logger.warning("No duration source for quiz %s; using default", self._quiz_id)
            self._begin(DEFAULT_QUIZ_DURATION_SECONDS)
            return

        generation = self._generation
        api_client = self._api_client
        quiz_id = self._quiz_id
        self._ticker.stop()
        self._phase = TimerPhase.IDLE
        self._fetch_pending = True
        self._runner.submit(
            lambda: api_client.get_quiz_duration_minutes(quiz_id),
            lambda minutes: self._handle_duration(generation, minutes * 60),
            lambda exc: self._handle_duration_error(generation, exc),
        )

    def stop(self) -> None:
        """Halt ticking for good; no further callbacks fire for this attempt."""
        self._generation += 1
        self._fetch_pending = False
        self._ticker.stop()
        if self._phase is TimerPhase.RUNNING or self._phase is TimerPhase.IDLE:
            self._phase = TimerPhase.STOPPED

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        self._sync_ticker()

    def reconcile(self, remaining_seconds: int) -> None:
        """Overwrite the remaining time with an authoritative value.

        Ignored once stopped. While the duration fetch is still pending the
        value starts the attempt and the fetched duration is discarded.
        """
        if self._phase is TimerPhase.STOPPED:
            return
        if self._fetch_pending:
            self._generation += 1
            self._begin(remaining_seconds)
            return
        self._remaining_seconds = max(0, int(remaining_seconds))
        logger.debug("Timer for quiz %s reconciled to %ss", self._quiz_id, self._remaining_seconds)
        self.time_changed.emit(self._remaining_seconds)

    def tick(self) -> None:
        """Advance one second; driven by the internal QTimer."""
        if self._phase is not TimerPhase.RUNNING or not self._enabled:
            return
        if self._remaining_seconds <= 1:
            self._remaining_seconds = 0
            self.time_changed.emit(0)
            self._expire()
            return
        self._remaining_seconds -= 1
        self.time_changed.emit(self._remaining_seconds)

    # --- Internals ---

    def _begin(self, seconds: int) -> None:
        self._fetch_pending = False
        self._remaining_seconds = max(0, int(seconds))
        self._phase = TimerPhase.RUNNING
        self._expiry_fired = False
        self.time_changed.emit(self._remaining_seconds)
        if self._remaining_seconds == 0:
            self._expire()
            return
        # Restart rather than stack a second interval on top of a running one.
        self._ticker.stop()
        self._sync_ticker()

    def _expire(self) -> None:
        self._ticker.stop()
        self._phase = TimerPhase.EXPIRED
        if self._expiry_fired:
            return
        self._expiry_fired = True
        logger.info("Time is up for quiz %s", self._quiz_id)
        self.time_up.emit()

    def _sync_ticker(self) -> None:
        should_tick = self._phase is TimerPhase.RUNNING and self._enabled
        if should_tick and not self._ticker.isActive():
            self._ticker.start()
        elif not should_tick and self._ticker.isActive():
            self._ticker.stop()

    def _handle_duration(self, generation: int, seconds: int) -> None:
        if generation != self._generation:
            return
        self._begin(seconds)

    def _handle_duration_error(self, generation: int, exc: Exception) -> None:
        if generation != self._generation:
            return
        logger.warning(
            "Could not fetch duration for quiz %s (%s); using %ss",
            self._quiz_id,
            exc,
            DEFAULT_QUIZ_DURATION_SECONDS,
        )
        self._begin(DEFAULT_QUIZ_DURATION_SECONDS)
