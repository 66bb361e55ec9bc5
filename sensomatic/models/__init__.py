from sensomatic.models.group import Group
from sensomatic.models.hangout import (
    AttendeeStatus,
    HangoutData,
    MatchResults,
    TimeOverlap,
    Timeline,
)
from sensomatic.models.ping import Ping, PingLifecycle, PingState
from sensomatic.models.response import Availability, Response
from sensomatic.models.user import User

__all__ = [
    "Group",
    "User",
    "Ping",
    "PingLifecycle",
    "PingState",
    "Response",
    "Availability",
    "HangoutData",
    "Timeline",
    "AttendeeStatus",
    "MatchResults",
    "TimeOverlap",
]
