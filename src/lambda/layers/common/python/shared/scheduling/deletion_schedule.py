"""Compute when a log group should go away and register the schedule for it."""

from __future__ import annotations

import json
import logging
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from shared.models.events import DeletionMessage, DeletionScheduleRequest, LogGroupCreatedDetail, LogGroupInfo

SCHEDULE_NAME_PREFIX = "DeleteLogGroup"
SHORT_NAME_LENGTH = 18
SUFFIX_LENGTH = 5
# Scheduler names allow [0-9a-zA-Z-_.]; log group names may also carry '/' and '#'.
_INVALID_NAME_CHARS = re.compile(r"[^0-9A-Za-z\-_.]")


def compute_fire_at(event_time: datetime, retention_in_days: Optional[int], delay_days: int) -> datetime:
    """Creation time in UTC plus retention and delay, truncated to whole seconds."""
    if event_time.tzinfo is None:
        event_time = event_time.replace(tzinfo=timezone.utc)
    days = (retention_in_days or 0) + delay_days
    fire_at = event_time.astimezone(timezone.utc) + timedelta(days=days)
    return fire_at.replace(microsecond=0)


def format_at_expression(fire_at: datetime) -> str:
    """Render a one-time schedule expression, e.g. ``at(2025-01-09T12:00:00)``."""
    if fire_at.tzinfo is not None:
        fire_at = fire_at.astimezone(timezone.utc)
    return f"at({fire_at.strftime('%Y-%m-%dT%H:%M:%S')})"


def build_schedule_name(log_group_name: str) -> str:
    """Short, mostly-unique schedule name derived from the log group name.

    The random suffix makes collisions unlikely, not impossible.
    """
    short = log_group_name.rstrip("/").split("/")[-1][:SHORT_NAME_LENGTH]
    short = _INVALID_NAME_CHARS.sub("-", short) or "unknown"
    suffix = uuid.uuid4().hex[:SUFFIX_LENGTH]
    return f"{SCHEDULE_NAME_PREFIX}-{short}-{suffix}"


class DeletionScheduler:
    """Registers self-deleting one-shot schedules that feed the deletion queue."""

    def __init__(
        self,
        client: Any,
        *,
        target_queue_arn: str,
        role_arn: str,
        delay_days: int,
        window_minutes: int = 5,
    ) -> None:
        self._client = client
        self.target_queue_arn = target_queue_arn
        self.role_arn = role_arn
        self.delay_days = delay_days
        self.window_minutes = window_minutes

    def build_request(self, detail: LogGroupCreatedDetail, info: LogGroupInfo) -> DeletionScheduleRequest:
        return DeletionScheduleRequest(
            name=build_schedule_name(detail.log_group_name),
            fire_at=compute_fire_at(detail.event_time, info.retention_in_days, self.delay_days),
            target_queue_arn=self.target_queue_arn,
            role_arn=self.role_arn,
            payload=DeletionMessage(log_group_name=detail.log_group_name, aws_region=detail.aws_region),
            window_minutes=self.window_minutes,
        )

    def register(self, request: DeletionScheduleRequest, *, log: Optional[logging.LoggerAdapter] = None) -> str:
        """Create the schedule and return its ARN."""
        expression = format_at_expression(request.fire_at)
        response = self._client.create_schedule(
            Name=request.name,
            ScheduleExpression=expression,
            ScheduleExpressionTimezone="UTC",
            FlexibleTimeWindow={"Mode": "FLEXIBLE", "MaximumWindowInMinutes": request.window_minutes},
            Target={
                "Arn": request.target_queue_arn,
                "RoleArn": request.role_arn,
                "Input": json.dumps(request.payload.to_wire()),
            },
            ActionAfterCompletion="DELETE",
        )
        schedule_arn = str(response.get("ScheduleArn", ""))
        if log is not None:
            log.info(
                "Created deletion schedule",
                extra={
                    "schedule_name": request.name,
                    "schedule_expression": expression,
                    "schedule_arn": schedule_arn,
                },
            )
        return schedule_arn

    def schedule(
        self,
        detail: LogGroupCreatedDetail,
        info: LogGroupInfo,
        *,
        log: Optional[logging.LoggerAdapter] = None,
    ) -> DeletionScheduleRequest:
        request = self.build_request(detail, info)
        self.register(request, log=log)
        return request
