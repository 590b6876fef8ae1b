"""Live session services, one per component of the engine."""

from .connection_manager import ConnectionManager, Subscription
from .live_monitor import LiveMonitorAggregator, sort_alerts
from .position_tracker import PositionTracker, find_rank
from .request_runner import RequestRunner
from .room_membership import RoomMembershipController
from .session_timer import SessionTimer

__all__ = [
    "ConnectionManager",
    "LiveMonitorAggregator",
    "PositionTracker",
    "RequestRunner",
    "RoomMembershipController",
    "SessionTimer",
    "Subscription",
    "find_rank",
    "sort_alerts",
]
