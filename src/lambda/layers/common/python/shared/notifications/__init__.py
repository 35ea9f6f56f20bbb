"""Alarm notifications delivered to a Slack workflow webhook."""

from .webhook import (  # noqa: F401
    ALARM_EMOJI,
    WebhookNotifier,
    build_cloudwatch_url,
    build_notification_payload,
    format_alarm_time,
)

__all__ = [
    "ALARM_EMOJI",
    "WebhookNotifier",
    "build_cloudwatch_url",
    "build_notification_payload",
    "format_alarm_time",
]
