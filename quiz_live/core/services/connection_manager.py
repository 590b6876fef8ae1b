"""Service owning the shared event-stream connection and its subscribers."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any
from uuid import uuid4

from PySide6.QtCore import QObject, Signal, Slot

from quiz_live.constants import event_names
from quiz_live.core.events import ConnectionLifecycleEvent, decode_event
from quiz_live.core.models import ConnectionState
from quiz_live.transport.base import Transport, TransportError

logger = logging.getLogger(__name__)

EventCallback = Callable[[Any], None]


class Subscription:
    """Handle returned by :meth:`ConnectionManager.subscribe`."""

    def __init__(self, manager: ConnectionManager, event_name: str, key: str) -> None:
        self._manager = manager
        self.event_name = event_name
        self.key = key
        self._disposed = False

    @property
    def active(self) -> bool:
        return not self._disposed and self._manager._owns(self)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._manager._remove_if_owned(self)


class _ConnectionBridge(QObject):
    """Main-thread receiver for transport signals; owns the public state signal."""

    state_changed = Signal(object)

    def __init__(self, manager: ConnectionManager) -> None:
        super().__init__()
        self._manager = manager

    @Slot(str, object)
    def on_lifecycle(self, event_name: str, detail: object) -> None:
        self._manager._handle_lifecycle(event_name, detail)

    @Slot(str, object)
    def on_event(self, event_name: str, payload: object) -> None:
        self._manager._handle_event(event_name, payload)


class ConnectionManager:
    """Multiplexes independent features over one transport.

    Data events are decoded into typed models before dispatch. Lifecycle
    notifications are dispatched as :class:`ConnectionLifecycleEvent` to
    subscribers of the lifecycle event names and also drive ``state``.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._state = ConnectionState.DISCONNECTED
        self._connecting = False
        # event name -> listener key -> (callback, owning subscription)
        self._listeners: dict[str, dict[str, tuple[EventCallback, Subscription]]] = {}

        self._bridge = _ConnectionBridge(self)
        self._transport.lifecycle.connect(self._bridge.on_lifecycle)
        self._transport.event_received.connect(self._bridge.on_event)

    @property
    def state_changed(self) -> Signal:
        """Emits the new :class:`ConnectionState` on every transition."""
        return self._bridge.state_changed

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def connect(self) -> None:
        """Open the transport unless it is already connected or connecting."""
        if self._state is not ConnectionState.DISCONNECTED or self._connecting:
            return
        self._connecting = True
        self._transport.open()

    def disconnect(self) -> None:
        self._connecting = False
        self._transport.close()
        self._set_state(ConnectionState.DISCONNECTED)

    def emit(self, event_name: str, payload: object) -> bool:
        """Send a client message; returns False when it could not be sent."""
        if not self.is_connected():
            logger.debug("Not connected; dropping outgoing %s", event_name)
            return False
        try:
            self._transport.send(event_name, payload)
        except TransportError as exc:
            logger.warning("Failed to send %s: %s", event_name, exc)
            return False
        return True

    # --- Subscriptions ---

    def subscribe(
        self,
        event_name: str,
        callback: EventCallback,
        key: str | None = None,
    ) -> Subscription:
        """Register ``callback`` for ``event_name`` and return its handle.

        Registering an existing key for the same event replaces only that
        registration.
        """
        listener_key = key or uuid4().hex
        subscription = Subscription(self, event_name, listener_key)
        self._listeners.setdefault(event_name, {})[listener_key] = (callback, subscription)
        return subscription

    def on(self, event_name: str, listener_key: str, callback: EventCallback) -> Subscription:
        return self.subscribe(event_name, callback, key=listener_key)

    def off(self, event_name: str, listener_key: str) -> None:
        listeners = self._listeners.get(event_name)
        if not listeners:
            return
        listeners.pop(listener_key, None)
        if not listeners:
            del self._listeners[event_name]

    def has_listener(self, event_name: str, listener_key: str) -> bool:
        return listener_key in self._listeners.get(event_name, {})

    def listener_count(self, event_name: str | None = None) -> int:
        if event_name is not None:
            return len(self._listeners.get(event_name, {}))
        return sum(len(listeners) for listeners in self._listeners.values())

    def _owns(self, subscription: Subscription) -> bool:
        entry = self._listeners.get(subscription.event_name, {}).get(subscription.key)
        return entry is not None and entry[1] is subscription

    def _remove_if_owned(self, subscription: Subscription) -> None:
        # A key re-registered by someone else must survive the old handle's dispose.
        if self._owns(subscription):
            self.off(subscription.event_name, subscription.key)

    # --- Transport callbacks (main thread) ---

    def _handle_lifecycle(self, event_name: str, detail: object) -> None:
        if event_name == event_names.CONNECT:
            self._connecting = False
            self._set_state(ConnectionState.CONNECTED)
        elif event_name == event_names.DISCONNECT:
            self._set_state(ConnectionState.DISCONNECTED)
        elif event_name in (event_names.RECONNECTING, event_names.RECONNECT_ATTEMPT):
            self._set_state(ConnectionState.RECONNECTING)
        elif event_name == event_names.RECONNECT_FAILED:
            self._connecting = False
            self._set_state(ConnectionState.DISCONNECTED)

        event = decode_event(event_name, detail)
        if isinstance(event, ConnectionLifecycleEvent):
            self._dispatch(event_name, event)

    def _handle_event(self, event_name: str, payload: object) -> None:
        if event_name in event_names.LIFECYCLE_EVENTS:
            logger.warning("Ignoring data event using reserved name %r", event_name)
            return
        if event_name not in self._listeners:
            return
        event = decode_event(event_name, payload)
        if event is not None:
            self._dispatch(event_name, event)

    def _dispatch(self, event_name: str, event: object) -> None:
        # Copy so callbacks may subscribe or dispose while we iterate.
        for key, (callback, subscription) in list(self._listeners.get(event_name, {}).items()):
            if not subscription.active:
                continue
            try:
                callback(event)
            except Exception:
                logger.exception("Listener %r for %s raised", key, event_name)

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        logger.info("Connection state: %s -> %s", self._state.value, state.value)
        self._state = state
        self._bridge.state_changed.emit(state)
