"""Models subpackage exposed via Common Layer."""

from .events import (
    AlarmStateChangeEvent,
    DeletionMessage,
    DeletionScheduleRequest,
    LogGroupCreatedDetail,
    LogGroupCreatedEvent,
    LogGroupInfo,
    NotificationPayload,
)
from .settings import EnvSettings

__all__ = [
    "AlarmStateChangeEvent",
    "DeletionMessage",
    "DeletionScheduleRequest",
    "EnvSettings",
    "LogGroupCreatedDetail",
    "LogGroupCreatedEvent",
    "LogGroupInfo",
    "NotificationPayload",
]
