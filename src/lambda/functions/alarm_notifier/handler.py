"""CloudWatch alarm action Lambda: forwards ALARM transitions to Slack.

Only events whose new state is ALARM are delivered; OK and
INSUFFICIENT_DATA transitions are logged and skipped without touching SSM
or the webhook. Delivery retries with exponential backoff and re-raises
after the last attempt so the invocation itself is marked failed.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import requests

from shared.errors import ConfigurationError
from shared.clients import ParameterStore
from shared.models import AlarmStateChangeEvent, EnvSettings
from shared.notifications import WebhookNotifier, build_notification_payload
from shared.utils.logger import extract_correlation_id, get_logger, log_event_if_enabled


logger = get_logger(__name__)

_PARAMETERS = ParameterStore()
_session = requests.Session()
_sleep = time.sleep


def _webhook_url(settings: EnvSettings) -> str:
    param_name = settings.require("webhook_param_name")
    url = _PARAMETERS.get(param_name, decrypt=True, max_age=settings.webhook_cache_seconds)
    if not url.strip():
        raise ConfigurationError("Webhook URL not available")
    return url.strip()


def main(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    corr_id = extract_correlation_id(event, context)
    log = get_logger(__name__, correlation_id=corr_id) if corr_id else logger
    log_event_if_enabled(log, event)

    alarm_event = AlarmStateChangeEvent.model_validate(event)
    state = alarm_event.alarm_data.state.value

    if not alarm_event.is_alarm:
        log.info("Skipping non-ALARM state", extra={"state": state})
        return {"status": "SKIPPED", "state": state}

    settings = EnvSettings.load()
    url = _webhook_url(settings)

    log.info(
        "Processing CloudWatch alarm",
        extra={"alarm_name": alarm_event.alarm_data.alarm_name, "state": state},
    )
    payload = build_notification_payload(alarm_event, settings.require("app_name"))
    notifier = WebhookNotifier(url, session=_session, sleep=_sleep, log=log)
    attempt = notifier.send(payload)

    return {"status": "SENT", "alarm_name": payload.alarm_name, "attempts": attempt + 1}
