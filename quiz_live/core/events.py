"""Typed event-stream messages decoded at the transport boundary.

Every payload is validated into one member of a closed union before any
component sees it. The event name on the wire is the discriminant; it is
copied into the ``event`` field during decoding.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from quiz_live.constants import event_names
from quiz_live.core.identity import UserId
from quiz_live.core.monitoring_models import LiveMonitoringSnapshot

logger = logging.getLogger(__name__)


class _EventModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class ConnectionLifecycleEvent(_EventModel):
    """Advisory connection status change; carries no quiz data."""

    event: Literal[
        "connect",
        "disconnect",
        "connect_error",
        "reconnecting",
        "reconnect_attempt",
        "reconnect_failed",
    ]
    attempt: int | None = None
    reason: str | None = None


class UserPositionUpdate(_EventModel):
    event: Literal["userPositionUpdate"] = "userPositionUpdate"
    quiz_id: int | None = Field(default=None, validation_alias=AliasChoices("quizId", "quiz_id"))
    user_id: UserId = Field(validation_alias=AliasChoices("userId", "user_id"))
    position: int = Field(ge=1)
    total_participants: int = Field(
        ge=0, validation_alias=AliasChoices("totalParticipants", "total_participants")
    )
    score: float | None = None


class ProgressTrackingUpdate(_EventModel):
    event: Literal["progressTrackingUpdate"] = "progressTrackingUpdate"
    snapshot: LiveMonitoringSnapshot

    @property
    def quiz_id(self) -> int:
        return self.snapshot.quiz_id


class Participant(_EventModel):
    user_id: UserId = Field(validation_alias=AliasChoices("userId", "user_id"))
    name: str = ""


class NewParticipant(_EventModel):
    event: Literal["newParticipant"] = "newParticipant"
    quiz_id: int | None = Field(default=None, validation_alias=AliasChoices("quizId", "quiz_id"))
    participant: Participant


class ParticipantLeft(_EventModel):
    event: Literal["participantLeft"] = "participantLeft"
    quiz_id: int | None = Field(default=None, validation_alias=AliasChoices("quizId", "quiz_id"))
    participant: Participant


class QuizCompleted(_EventModel):
    event: Literal["quizCompleted"] = "quizCompleted"
    quiz_id: int = Field(validation_alias=AliasChoices("quizId", "quiz_id"))
    final_score: float | None = Field(
        default=None, validation_alias=AliasChoices("finalScore", "final_score")
    )


QuizEvent = Annotated[
    Union[
        ConnectionLifecycleEvent,
        UserPositionUpdate,
        ProgressTrackingUpdate,
        NewParticipant,
        ParticipantLeft,
        QuizCompleted,
    ],
    Field(discriminator="event"),
]

_EVENT_ADAPTER: TypeAdapter[QuizEvent] = TypeAdapter(QuizEvent)

KNOWN_EVENTS: frozenset[str] = event_names.LIFECYCLE_EVENTS | {
    event_names.USER_POSITION_UPDATE,
    event_names.PROGRESS_TRACKING_UPDATE,
    event_names.NEW_PARTICIPANT,
    event_names.PARTICIPANT_LEFT,
    event_names.QUIZ_COMPLETED,
}


def decode_event(event_name: str, payload: Any) -> QuizEvent | None:
    """Decode a raw payload into its typed event, or None if it must be dropped."""
    if event_name not in KNOWN_EVENTS:
        logger.debug("Ignoring unknown event %r", event_name)
        return None

    if event_name == event_names.PROGRESS_TRACKING_UPDATE:
        raw: dict[str, Any] = {"snapshot": payload}
    elif payload is None:
        raw = {}
    elif isinstance(payload, dict):
        raw = dict(payload)
    elif event_name in event_names.LIFECYCLE_EVENTS:
        # Lifecycle payloads are a bare attempt number or reason string.
        raw = {"attempt": payload} if isinstance(payload, int) else {"reason": str(payload)}
    else:
        logger.warning("Dropping %s event with non-object payload: %r", event_name, payload)
        return None

    raw["event"] = event_name
    try:
        return _EVENT_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        logger.warning("Dropping malformed %s event: %s", event_name, exc.errors(include_url=False))
        return None
