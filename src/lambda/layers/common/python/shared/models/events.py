"""Typed event models for Lambda handlers using Pydantic v2.

Wire payloads use camelCase keys; attributes are snake_case. Models accept
either form on input and serialise by alias.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

AlarmStateValue = Literal["ALARM", "OK", "INSUFFICIENT_DATA"]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


# ===== Log group lifecycle =====


class RequestParameters(_WireModel):
    log_group_name: str = Field(min_length=1)


class LogGroupCreatedDetail(_WireModel):
    """CloudTrail CreateLogGroup details forwarded by EventBridge."""

    event_time: datetime
    aws_region: str = Field(min_length=1)
    request_parameters: RequestParameters

    @field_validator("event_time")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:  # type: ignore[override]
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def log_group_name(self) -> str:
        return self.request_parameters.log_group_name


class LogGroupCreatedEvent(_WireModel):
    """EventBridge envelope delivered in the intake queue message body."""

    detail: LogGroupCreatedDetail


class LogGroupInfo(_WireModel):
    log_group_name: str
    retention_in_days: Optional[int] = None


class DeletionMessage(_WireModel):
    """Payload the deletion schedule delivers to the deletion queue."""

    log_group_name: str = Field(min_length=1)
    aws_region: str = Field(min_length=1)


class DeletionScheduleRequest(_WireModel):
    name: str
    fire_at: datetime
    target_queue_arn: str
    role_arn: str
    payload: DeletionMessage
    window_minutes: int = 5


# ===== CloudWatch alarm action =====


class AlarmState(_WireModel):
    value: AlarmStateValue
    timestamp: str
    reason: str
    reason_data: Optional[str] = None


class AlarmConfiguration(_WireModel):
    description: str = ""
    metrics: Optional[List[Any]] = None


class AlarmData(_WireModel):
    alarm_name: str
    state: AlarmState
    previous_state: Optional[AlarmState] = None
    configuration: AlarmConfiguration


class AlarmStateChangeEvent(_WireModel):
    """Payload CloudWatch sends to a Lambda alarm action."""

    source: Literal["aws.cloudwatch"]
    alarm_arn: str
    account_id: str
    time: str
    region: str
    alarm_data: AlarmData

    @property
    def is_alarm(self) -> bool:
        return self.alarm_data.state.value == "ALARM"


class NotificationPayload(_WireModel):
    """Body posted to the Slack workflow webhook."""

    emoji: str
    alarm_name: str
    alarm_description: str
    cloud_watch_url: str
    region: str
    alarm_time: str
    app_name: str
