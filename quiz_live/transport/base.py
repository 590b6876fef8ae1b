"""Transport interface the connection manager multiplexes over."""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal


class TransportError(Exception):
    """Raised when the transport is used outside of its lifecycle."""


class Transport(QObject):
    """One physical bidirectional event-stream connection.

    Implementations may receive on background threads; they report through
    the two signals below and the receiving ``QObject`` decides the thread
    the handlers run on.

    ``lifecycle`` carries ``(event_name, detail)`` where ``detail`` is an
    attempt number, a reason string or ``None``. ``event_received`` carries
    ``(event_name, payload)`` for data events.
    """

    lifecycle = Signal(str, object)
    event_received = Signal(str, object)

    def open(self) -> None:
        """Start connecting without blocking; reconnect on loss until closed."""
        raise NotImplementedError

    def close(self) -> None:
        """Tear the connection down and stop reconnecting."""
        raise NotImplementedError

    def send(self, event_name: str, payload: object) -> None:
        raise NotImplementedError

    def is_connected(self) -> bool:
        raise NotImplementedError
