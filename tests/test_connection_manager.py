"""ConnectionManager: connect idempotence, state tracking and keyed listeners."""

from quiz_live.core.events import ConnectionLifecycleEvent, UserPositionUpdate
from quiz_live.core.models import ConnectionState

POSITION = {"quizId": 7, "userId": 42, "position": 2, "totalParticipants": 9}


class TestConnect:
    def test_connect_opens_transport_once(self, connection, transport):
        connection.connect()
        connection.connect()
        assert transport.open_calls == 1

        transport.simulate_connect()
        connection.connect()
        assert transport.open_calls == 1
        assert connection.is_connected()

    def test_state_transitions_are_signalled(self, connection, transport):
        states = []
        connection.state_changed.connect(states.append)

        connection.connect()
        transport.simulate_connect()
        transport.simulate_drop()
        transport.simulate_connect()

        assert states == [
            ConnectionState.CONNECTED,
            ConnectionState.DISCONNECTED,
            ConnectionState.RECONNECTING,
            ConnectionState.CONNECTED,
        ]

    def test_reconnect_failed_allows_new_connect(self, connection, transport):
        connection.connect()
        transport.lifecycle.emit("reconnecting", None)
        transport.lifecycle.emit("reconnect_failed", 5)
        assert connection.state is ConnectionState.DISCONNECTED

        connection.connect()
        assert transport.open_calls == 2

    def test_disconnect_closes_transport(self, connected, transport):
        connected.disconnect()
        assert transport.close_calls == 1
        assert connected.state is ConnectionState.DISCONNECTED

    def test_lifecycle_listeners_receive_typed_events(self, connection, transport):
        attempts = []
        connection.subscribe("reconnect_attempt", attempts.append)
        connection.connect()
        transport.simulate_connect()
        transport.simulate_drop()

        assert len(attempts) == 1
        assert isinstance(attempts[0], ConnectionLifecycleEvent)
        assert attempts[0].attempt == 1


class TestEmit:
    def test_emit_when_connected(self, connected, transport):
        assert connected.emit("joinRoom", "quiz:7")
        assert transport.sent == [("joinRoom", "quiz:7")]

    def test_emit_when_disconnected_is_dropped(self, connection, transport):
        assert not connection.emit("joinRoom", "quiz:7")
        assert transport.sent == []


class TestListeners:
    def test_events_are_decoded_before_dispatch(self, connected, transport):
        received = []
        connected.on("userPositionUpdate", "a", received.append)
        transport.deliver("userPositionUpdate", POSITION)

        assert len(received) == 1
        assert isinstance(received[0], UserPositionUpdate)
        assert received[0].position == 2

    def test_off_removes_only_that_key(self, connected, transport):
        first, second = [], []
        connected.on("userPositionUpdate", "first", first.append)
        connected.on("userPositionUpdate", "second", second.append)

        connected.off("userPositionUpdate", "first")
        transport.deliver("userPositionUpdate", POSITION)

        assert first == []
        assert len(second) == 1

    def test_off_unknown_key_is_noop(self, connected):
        connected.off("userPositionUpdate", "missing")
        connected.off("neverSubscribed", "missing")
        assert connected.listener_count() == 0

    def test_dispose_handle(self, connected, transport):
        received = []
        subscription = connected.subscribe("userPositionUpdate", received.append)
        assert subscription.active

        subscription.dispose()
        subscription.dispose()
        transport.deliver("userPositionUpdate", POSITION)

        assert received == []
        assert not subscription.active
        assert connected.listener_count("userPositionUpdate") == 0

    def test_same_key_replaces_registration(self, connected, transport):
        old, new = [], []
        old_handle = connected.on("userPositionUpdate", "view", old.append)
        connected.on("userPositionUpdate", "view", new.append)

        # The stale handle must not remove the newer registration.
        old_handle.dispose()
        transport.deliver("userPositionUpdate", POSITION)

        assert old == []
        assert len(new) == 1

    def test_same_key_on_different_events_is_independent(self, connected, transport):
        positions, joins = [], []
        connected.on("userPositionUpdate", "view", positions.append)
        connected.on("newParticipant", "view", joins.append)

        connected.off("newParticipant", "view")
        transport.deliver("userPositionUpdate", POSITION)

        assert len(positions) == 1

    def test_failing_listener_does_not_block_others(self, connected, transport):
        received = []

        def broken(_event):
            raise RuntimeError("boom")

        connected.on("userPositionUpdate", "broken", broken)
        connected.on("userPositionUpdate", "ok", received.append)
        transport.deliver("userPositionUpdate", POSITION)

        assert len(received) == 1

    def test_listener_removed_during_dispatch_is_skipped(self, connected, transport):
        received = []

        def remove_other(_event):
            connected.off("userPositionUpdate", "second")

        connected.on("userPositionUpdate", "first", remove_other)
        connected.on("userPositionUpdate", "second", received.append)
        transport.deliver("userPositionUpdate", POSITION)

        assert received == []

    def test_malformed_payload_is_not_dispatched(self, connected, transport):
        received = []
        connected.on("userPositionUpdate", "a", received.append)
        transport.deliver("userPositionUpdate", {"userId": 42})
        assert received == []

    def test_data_event_with_lifecycle_name_is_ignored(self, connected, transport):
        received = []
        connected.subscribe("connect", received.append)
        transport.deliver("connect", {"spoofed": True})
        assert received == []
