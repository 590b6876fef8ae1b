"""Domain models for the live quiz session engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from quiz_live.core.identity import UserId, normalize_user_id


class ConnectionState(Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    RECONNECTING = "reconnecting"


class RoomKind(Enum):
    QUIZ = "quiz"
    ROLE = "role"
    PERSONAL = "personal"


class Role(Enum):
    TEACHER = "teacher"
    STUDENT = "student"


_ROLE_ROOM_SUFFIX = {Role.TEACHER: "teachers", Role.STUDENT: "students"}


@dataclass(frozen=True, slots=True)
class RoomMembership:
    """A (room kind, room key) pair; equal memberships are the same room."""

    kind: RoomKind
    quiz_id: int
    role: Role | None = None
    user_id: str | None = None

    @classmethod
    def quiz(cls, quiz_id: int) -> RoomMembership:
        return cls(RoomKind.QUIZ, quiz_id)

    @classmethod
    def for_role(cls, quiz_id: int, role: Role) -> RoomMembership:
        return cls(RoomKind.ROLE, quiz_id, role=role)

    @classmethod
    def personal(cls, quiz_id: int, user_id: UserId) -> RoomMembership:
        normalized = normalize_user_id(user_id)
        if normalized is None:
            raise ValueError("A personal room needs a user id.")
        return cls(RoomKind.PERSONAL, quiz_id, user_id=normalized)

    @property
    def room_name(self) -> str:
        """Server-side room name used by joinRoom/leaveRoom messages."""
        if self.kind is RoomKind.QUIZ:
            return f"quiz:{self.quiz_id}"
        if self.kind is RoomKind.ROLE:
            return f"quiz:{self.quiz_id}:{_ROLE_ROOM_SUFFIX[self.role]}"
        return f"quiz:{self.quiz_id}:{self.user_id}"

    def join_payload(self) -> dict[str, object]:
        """Declarative description of the membership."""
        payload: dict[str, object] = {"quiz_id": self.quiz_id}
        if self.role is not None:
            payload["role"] = self.role.value
        if self.user_id is not None:
            payload["user_id"] = self.user_id
        return payload


class TimerPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    EXPIRED = "expired"
    STOPPED = "stopped"


def format_time(seconds: int) -> str:
    """Format seconds as zero-padded ``MM:SS``; minutes may exceed two digits."""
    seconds = max(0, int(seconds))
    minutes, remaining_seconds = divmod(seconds, 60)
    return f"{minutes:02d}:{remaining_seconds:02d}"


@dataclass(frozen=True, slots=True)
class TimerState:
    """Snapshot handed to the presentation layer."""

    remaining_seconds: int
    running: bool

    @property
    def formatted(self) -> str:
        return format_time(self.remaining_seconds)


@dataclass(frozen=True, slots=True)
class PositionSnapshot:
    """Current rank of the local user; None means not known yet."""

    rank: int | None = None
    total: int | None = None

    @property
    def is_known(self) -> bool:
        return self.rank is not None
