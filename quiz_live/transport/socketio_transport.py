"""Socket.IO implementation of the event-stream transport."""

from __future__ import annotations

import logging
from threading import Event, Lock, Thread

import socketio
from socketio.exceptions import BadNamespaceError, ConnectionError as SocketConnectionError

from quiz_live.constants import event_names
from quiz_live.constants.network_constants import (
    CONNECT_WAIT_TIMEOUT_SECONDS,
    RECONNECT_ATTEMPTS,
    RECONNECT_DELAY_MAX_SECONDS,
    RECONNECT_DELAY_SECONDS,
    SERVER_URL,
    SOCKET_TRANSPORTS,
)
from quiz_live.transport.base import Transport, TransportError

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential delay before reconnect ``attempt`` (1-based)."""
    return min(max_delay, base_delay * (2 ** (attempt - 1)))


class SocketIOTransport(Transport):
    """Socket.IO client that reconnects with backoff until closed.

    Library-level reconnection is disabled so that every attempt can be
    reported as a ``reconnect_attempt`` lifecycle notification.
    """

    def __init__(
        self,
        server_url: str = SERVER_URL,
        token: str | None = None,
        reconnect_attempts: int = RECONNECT_ATTEMPTS,
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
        reconnect_delay_max: float = RECONNECT_DELAY_MAX_SECONDS,
    ) -> None:
        super().__init__()
        self._server_url = server_url
        self._token = token
        self._reconnect_attempts = reconnect_attempts
        self._reconnect_delay = reconnect_delay
        self._reconnect_delay_max = reconnect_delay_max

        self._client = socketio.Client(reconnection=False, logger=False, engineio_logger=False)
        self._client.on("connect", self._handle_connect)
        self._client.on("disconnect", self._handle_disconnect)
        self._client.on("*", self._handle_event)

        self._lock = Lock()
        self._closed = Event()
        self._worker: Thread | None = None

    def open(self) -> None:
        with self._lock:
            self._closed.clear()
            if self._client.connected or self._worker_running():
                return
            self._start_worker(reconnecting=False)

    def close(self) -> None:
        self._closed.set()
        if self._client.connected:
            self._client.disconnect()

    def send(self, event_name: str, payload: object) -> None:
        if not self._client.connected:
            raise TransportError(f"Cannot send {event_name!r}: not connected.")
        try:
            self._client.emit(event_name, payload)
        except BadNamespaceError as exc:
            raise TransportError(f"Cannot send {event_name!r}: {exc}") from exc

    def is_connected(self) -> bool:
        return bool(self._client.connected)

    # --- Socket.IO callbacks (engine.io threads) ---

    def _handle_connect(self) -> None:
        logger.info("Connected to %s", self._server_url)
        self.lifecycle.emit(event_names.CONNECT, None)

    def _handle_disconnect(self, *args: object) -> None:
        reason = str(args[0]) if args else None
        self.lifecycle.emit(event_names.DISCONNECT, reason)
        if self._closed.is_set():
            return
        logger.warning("Connection lost (%s); reconnecting", reason or "unknown reason")
        with self._lock:
            if not self._worker_running():
                self._start_worker(reconnecting=True)

    def _handle_event(self, event_name: str, *args: object) -> None:
        payload = args[0] if args else None
        self.event_received.emit(event_name, payload)

    # --- Connect/reconnect worker ---

    def _worker_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def _start_worker(self, reconnecting: bool) -> None:
        self._worker = Thread(
            target=self._run_connect_loop,
            args=(reconnecting,),
            name="quiz-live-socketio-connect",
            daemon=True,
        )
        self._worker.start()

    def _run_connect_loop(self, reconnecting: bool) -> None:
        if not reconnecting and self._try_connect():
            return

        self.lifecycle.emit(event_names.RECONNECTING, None)
        for attempt in range(1, self._reconnect_attempts + 1):
            delay = backoff_delay(attempt, self._reconnect_delay, self._reconnect_delay_max)
            if self._closed.wait(delay):
                return
            self.lifecycle.emit(event_names.RECONNECT_ATTEMPT, attempt)
            if self._try_connect():
                return

        logger.error(
            "Giving up on %s after %d reconnect attempts", self._server_url, self._reconnect_attempts
        )
        self.lifecycle.emit(event_names.RECONNECT_FAILED, self._reconnect_attempts)

    def _try_connect(self) -> bool:
        if self._closed.is_set():
            return True
        try:
            self._client.connect(
                self._server_url,
                auth={"token": self._token} if self._token else None,
                transports=SOCKET_TRANSPORTS,
                wait_timeout=CONNECT_WAIT_TIMEOUT_SECONDS,
            )
        except SocketConnectionError as exc:
            logger.warning("Connection attempt to %s failed: %s", self._server_url, exc)
            self.lifecycle.emit(event_names.CONNECT_ERROR, str(exc))
            return False
        return True
