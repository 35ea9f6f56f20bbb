"""Typed configuration contracts for environment-specific settings."""

from __future__ import annotations

from typing import Dict, List, NotRequired, Required, TypedDict


class EnvironmentConfig(TypedDict, total=False):
    """Strongly-typed environment configuration contract."""

    region: Required[str]
    account_id: NotRequired[str | None]

    # Resource name prefix; also the stack name and the notifier's app name
    app_name: Required[str]
    # Log group name prefixes to match, e.g. "/aws/lambda/Logger-"
    log_group_patterns: Required[List[str]]
    # Tags that must be present on the CreateLogGroup request
    required_tags: NotRequired[Dict[str, str]]
    # Days to wait after the retention period before deleting
    deletion_delay_days: Required[int]
    # SSM parameter (SecureString) holding the Slack workflow webhook URL
    webhook_parameter_name: Required[str]
    webhook_cache_seconds: NotRequired[int]

    lambda_memory: NotRequired[int]
    lambda_timeout: NotRequired[int]
    # Alarm notifier only; covers all webhook attempts and backoff
    notifier_timeout: NotRequired[int]
    log_retention_days: NotRequired[int]
    log_level: NotRequired[str]
    log_event: NotRequired[bool]

    sqs_batch_size: NotRequired[int]
    max_receive_count: NotRequired[int]
    queue_retention_days: NotRequired[int]
    schedule_window_minutes: NotRequired[int]
    intake_max_concurrency: NotRequired[int]

    tags: NotRequired[Dict[str, str]]
