"""Event-stream transports."""

from .base import Transport, TransportError
from .socketio_transport import SocketIOTransport

__all__ = ["SocketIOTransport", "Transport", "TransportError"]
