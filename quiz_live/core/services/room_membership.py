"""Service for declarative room joins on top of the connection manager."""

from __future__ import annotations

import logging

from quiz_live.constants import event_names
from quiz_live.core.identity import UserId
from quiz_live.core.models import Role, RoomMembership
from quiz_live.core.services.connection_manager import ConnectionManager, Subscription

logger = logging.getLogger(__name__)


class RoomMembershipController:
    """Tracks the rooms this client wants to be in and keeps the server in sync.

    Joining a room already held is a no-op. The server forgets memberships
    when the physical connection drops, so every held room is joined again
    on each ``connect`` notification.
    """

    def __init__(self, connection: ConnectionManager) -> None:
        self._connection = connection
        self._memberships: dict[RoomMembership, None] = {}
        self._connect_subscription: Subscription | None = connection.subscribe(
            event_names.CONNECT, self._handle_connect
        )

    def join_quiz_room(self, quiz_id: int) -> RoomMembership:
        return self.join(RoomMembership.quiz(quiz_id))

    def join_role_room(self, quiz_id: int, role: Role) -> RoomMembership:
        return self.join(RoomMembership.for_role(quiz_id, role))

    def join_personal_room(self, quiz_id: int, user_id: UserId) -> RoomMembership:
        return self.join(RoomMembership.personal(quiz_id, user_id))

    def join_all(self, quiz_id: int, role: Role, user_id: UserId | None = None) -> list[RoomMembership]:
        """Join the quiz room, the role room and, when a user is given, the personal room."""
        joined = [self.join_quiz_room(quiz_id), self.join_role_room(quiz_id, role)]
        if user_id is not None:
            joined.append(self.join_personal_room(quiz_id, user_id))
        return joined

    def join(self, membership: RoomMembership) -> RoomMembership:
        if membership in self._memberships:
            return membership
        self._memberships[membership] = None
        if self._connection.is_connected():
            self._send_join(membership)
        else:
            # Sent from _handle_connect once the transport is up.
            self._connection.connect()
        return membership

    def leave(self, membership: RoomMembership) -> None:
        if membership not in self._memberships:
            return
        del self._memberships[membership]
        self._connection.emit(event_names.LEAVE_ROOM, membership.room_name)

    def leave_all(self) -> None:
        for membership in list(self._memberships):
            self.leave(membership)

    def is_member(self, membership: RoomMembership) -> bool:
        return membership in self._memberships

    def memberships(self) -> list[RoomMembership]:
        return list(self._memberships)

    def close(self) -> None:
        """Leave every room and stop replaying joins."""
        self.leave_all()
        if self._connect_subscription is not None:
            self._connect_subscription.dispose()
            self._connect_subscription = None

    def _handle_connect(self, _event: object) -> None:
        if self._memberships:
            logger.info("Re-joining %d room(s) after connect", len(self._memberships))
        for membership in self._memberships:
            self._send_join(membership)

    def _send_join(self, membership: RoomMembership) -> None:
        logger.debug("Joining %s", membership.room_name)
        self._connection.emit(event_names.JOIN_ROOM, membership.room_name)
