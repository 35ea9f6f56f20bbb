"""Environment settings helpers provided via Common Layer."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Optional

from shared.errors import ConfigurationError


def _int_from_env(key: str, default: Optional[int] = None, *, minimum: int = 0) -> Optional[int]:
    raw = (os.environ.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{key} must be >= {minimum}, got {value}")
    return value


# Setting name -> Lambda environment variable
_ENV_VARS = {
    "environment": "ENVIRONMENT",
    "app_name": "APP_NAME",
    "deletion_queue_arn": "DELETION_QUEUE_ARN",
    "scheduler_role_arn": "SCHEDULER_ROLE_ARN",
    "deletion_delay_days": "DELETION_DELAY_DAYS",
    "webhook_param_name": "SLACK_WEBHOOK_PARAM_NAME",
}


@dataclass(frozen=True)
class EnvSettings:
    environment: Optional[str]
    app_name: Optional[str]
    deletion_queue_arn: Optional[str]
    scheduler_role_arn: Optional[str]
    deletion_delay_days: Optional[int]
    schedule_window_minutes: int
    webhook_param_name: Optional[str]
    webhook_cache_seconds: int

    @staticmethod
    def load() -> "EnvSettings":
        return EnvSettings(
            environment=os.environ.get("ENVIRONMENT"),
            app_name=os.environ.get("APP_NAME"),
            deletion_queue_arn=os.environ.get("DELETION_QUEUE_ARN"),
            scheduler_role_arn=os.environ.get("SCHEDULER_ROLE_ARN"),
            deletion_delay_days=_int_from_env("DELETION_DELAY_DAYS"),
            schedule_window_minutes=_int_from_env("SCHEDULE_WINDOW_MINUTES", 5, minimum=1),
            webhook_param_name=os.environ.get("SLACK_WEBHOOK_PARAM_NAME"),
            webhook_cache_seconds=_int_from_env("WEBHOOK_CACHE_SECONDS", 300),
        )

    def require(self, field_name: str) -> Any:
        """Return a setting or raise ConfigurationError when it is unset."""
        value = getattr(self, field_name)
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            raise ConfigurationError(f"{_ENV_VARS.get(field_name, field_name.upper())} is missing")
        return value
