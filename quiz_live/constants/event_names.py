"""Event-stream topic names used on the wire."""

CONNECT: str = "connect"
DISCONNECT: str = "disconnect"
CONNECT_ERROR: str = "connect_error"
RECONNECTING: str = "reconnecting"
RECONNECT_ATTEMPT: str = "reconnect_attempt"
RECONNECT_FAILED: str = "reconnect_failed"

LIFECYCLE_EVENTS: frozenset[str] = frozenset(
    {CONNECT, DISCONNECT, CONNECT_ERROR, RECONNECTING, RECONNECT_ATTEMPT, RECONNECT_FAILED}
)

JOIN_ROOM: str = "joinRoom"
LEAVE_ROOM: str = "leaveRoom"

USER_POSITION_UPDATE: str = "userPositionUpdate"
PROGRESS_TRACKING_UPDATE: str = "progressTrackingUpdate"
NEW_PARTICIPANT: str = "newParticipant"
PARTICIPANT_LEFT: str = "participantLeft"
QUIZ_COMPLETED: str = "quizCompleted"
