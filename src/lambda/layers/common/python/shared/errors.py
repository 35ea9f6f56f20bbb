"""Error taxonomy shared by the log group janitor Lambdas."""

from __future__ import annotations

from typing import List, Sequence


class LogGroupJanitorError(Exception):
    """Base class for errors raised by the shared layer."""


class ConfigurationError(LogGroupJanitorError):
    """A required setting is missing or malformed. Fatal to the invocation."""


class LogGroupNotFoundError(LogGroupJanitorError):
    """No log group with exactly the requested name exists."""

    def __init__(self, log_group_name: str, region: str) -> None:
        super().__init__(f"Log group not found or does not exist: {log_group_name} ({region})")
        self.log_group_name = log_group_name
        self.region = region


class InvalidAlarmArnError(LogGroupJanitorError, ValueError):
    """Alarm ARN does not have the arn:partition:service:region:account:alarm:name shape."""


class WebhookDeliveryError(LogGroupJanitorError):
    """Webhook POST failed on every attempt."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class FullBatchFailureError(LogGroupJanitorError):
    """Every record of an SQS batch failed."""

    def __init__(self, errors: Sequence[BaseException]) -> None:
        super().__init__(f"All records failed processing. {len(errors)} individual errors logged separately.")
        self.child_exceptions: List[BaseException] = list(errors)
