"""Runs blocking REST calls off the event thread and reports back on it."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

logger = logging.getLogger(__name__)


class _RequestSignals(QObject):
    # Created on the main thread, so emissions from workers are queued back to it.
    succeeded = Signal(object)
    failed = Signal(object)


class _RequestTask(QRunnable):
    def __init__(self, request: Callable[[], Any], signals: _RequestSignals) -> None:
        super().__init__()
        self._request = request
        self._signals = signals

    def run(self) -> None:
        try:
            result = self._request()
        except Exception as exc:
            self._signals.failed.emit(exc)
        else:
            self._signals.succeeded.emit(result)


class RequestRunner:
    """Submits requests to a ``QThreadPool``.

    ``on_success``/``on_error`` are always invoked on the thread that
    called :meth:`submit`, once the Qt event loop processes the result.
    """

    def __init__(self, pool: QThreadPool | None = None) -> None:
        self._pool = pool or QThreadPool.globalInstance()
        self._in_flight: set[_RequestSignals] = set()

    def submit(
        self,
        request: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        signals = _RequestSignals()
        self._in_flight.add(signals)

        def _finish(callback: Callable[[Any], None], value: Any) -> None:
            self._in_flight.discard(signals)
            callback(value)

        signals.succeeded.connect(lambda result: _finish(on_success, result))
        signals.failed.connect(lambda exc: _finish(on_error, exc))
        self._pool.start(_RequestTask(request, signals))

    def pending_count(self) -> int:
        return len(self._in_flight)

    def wait_for_done(self, timeout_ms: int = -1) -> bool:
        return self._pool.waitForDone(timeout_ms)
