"""Shape CloudWatch alarm events into webhook payloads and deliver them."""

from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from urllib.parse import quote

import requests

from shared.errors import InvalidAlarmArnError, WebhookDeliveryError
from shared.models.events import AlarmStateChangeEvent, NotificationPayload

ALARM_EMOJI = "🚨"
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT_SECONDS = 10

# CloudWatch writes offsets without a colon, e.g. 2025-01-02T12:34:56.000+0000
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def build_cloudwatch_url(alarm_arn: str) -> str:
    """Console deep link for an alarm ARN.

    arn:aws:cloudwatch:<region>:<account>:alarm:<name>
    """
    parts = alarm_arn.split(":", 6)
    if len(parts) < 7 or not parts[3] or not parts[6]:
        raise InvalidAlarmArnError(f"Invalid alarm ARN format: {alarm_arn}")
    region = parts[3]
    alarm_name = quote(parts[6], safe="!~*'()")
    return (
        f"https://{region}.console.aws.amazon.com/cloudwatch/home"
        f"?region={region}#alarmsV2:alarm/{alarm_name}"
    )


def format_alarm_time(iso_timestamp: str) -> str:
    """``2025-01-02T12:34:56.000Z`` -> ``2025-01-02 12:34:56 UTC``."""
    normalized = _COMPACT_OFFSET.sub(r"\1:\2", iso_timestamp.strip().replace("Z", "+00:00"))
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def build_notification_payload(event: AlarmStateChangeEvent, app_name: str) -> NotificationPayload:
    alarm = event.alarm_data
    return NotificationPayload(
        emoji=ALARM_EMOJI,
        alarm_name=alarm.alarm_name,
        alarm_description=alarm.configuration.description,
        cloud_watch_url=build_cloudwatch_url(event.alarm_arn),
        region=event.region,
        alarm_time=format_alarm_time(alarm.state.timestamp),
        app_name=app_name,
    )


class WebhookNotifier:
    """POSTs JSON payloads to a webhook with exponential backoff.

    Attempt ``n`` (0-based) that fails sleeps ``2**n`` seconds before the
    next one; after ``max_retries`` retries the last error is raised.
    """

    def __init__(
        self,
        url: str,
        *,
        session: Optional[Any] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        log: Optional[logging.LoggerAdapter] = None,
    ) -> None:
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self.url = url
        self._session = session or requests.Session()
        self.max_retries = max_retries
        self.timeout = timeout
        self._sleep = sleep
        self._log = log

    def _post(self, body: dict) -> None:
        response = self._session.post(self.url, json=body, timeout=self.timeout)
        if not 200 <= response.status_code < 300:
            raise requests.HTTPError(
                f"HTTP {response.status_code}: {getattr(response, 'reason', '')}",
                response=response,
            )

    def send(self, payload: NotificationPayload) -> int:
        """Deliver ``payload``; returns the 0-based attempt that succeeded."""
        body = payload.to_wire()
        total_attempts = self.max_retries + 1
        last_error: Optional[requests.RequestException] = None
        for attempt in range(total_attempts):
            if last_error is not None:
                backoff = 2 ** (attempt - 1)
                if self._log is not None:
                    self._log.warning(
                        "Retrying webhook delivery",
                        extra={"attempt": attempt, "backoff_seconds": backoff, "error": str(last_error)},
                    )
                self._sleep(backoff)
            try:
                self._post(body)
            except requests.RequestException as exc:
                last_error = exc
                continue
            if self._log is not None:
                self._log.info("Successfully sent to Slack", extra={"attempt": attempt})
            return attempt

        if self._log is not None:
            self._log.error(
                "Failed after retries",
                extra={"error": str(last_error), "total_attempts": total_attempts},
            )
        raise WebhookDeliveryError(
            f"Webhook delivery failed after {total_attempts} attempts: {last_error}",
            attempts=total_attempts,
        ) from last_error
