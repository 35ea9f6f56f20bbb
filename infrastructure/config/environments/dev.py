"""Development environment configuration."""

import os

dev_config = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": os.environ.get("CDK_DEFAULT_REGION", "eu-west-1"),
    "app_name": "LogGroupJanitor-dev",
    "log_group_patterns": [
        "/aws/lambda/Logger-",
        "/aws/lambda/Metrics-",
        "/aws/lambda/Tracer-",
        "/aws/lambda/Idempotency-",
        "/aws/lambda/Parameters-",
        "/aws/lambda/Layers-",
    ],
    "required_tags": {"Service": "Powertools-for-AWS-e2e-tests"},
    "deletion_delay_days": 1,
    "webhook_parameter_name": "/log-group-janitor/dev/slack-webhook-url",
    "webhook_cache_seconds": 300,
    "lambda_memory": 512,
    "lambda_timeout": 30,
    "notifier_timeout": 60,
    "log_retention_days": 7,
    "log_level": "DEBUG",
    "log_event": True,
    # Intake/deletion queue consumers
    "sqs_batch_size": 10,
    "max_receive_count": 3,
    "queue_retention_days": 14,
    "schedule_window_minutes": 5,
    "intake_max_concurrency": 2,
    "tags": {
        "Environment": "dev",
        "Project": "LogGroupJanitor",
    },
}
