"""SQS intake Lambda: schedules deletion of newly created log groups.

Each SQS record body is the EventBridge event for a CloudTrail
``CreateLogGroup`` call. For every record the handler looks up the log
group's retention and registers a one-shot schedule that will put a
deletion message on the deletion queue once retention plus the configured
delay has elapsed.

Implements partial batch failure semantics; a fully failed batch is reported
item by item rather than raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import boto3

from shared.batch import RecordContext, process_partial_response
from shared.clients import ADAPTIVE_RETRY_CONFIG, RegionalClientRegistry, fetch_log_group_info
from shared.models import EnvSettings, LogGroupCreatedEvent
from shared.scheduling import DeletionScheduler
from shared.utils.logger import bind, extract_correlation_id, get_logger, log_event_if_enabled


logger = get_logger(__name__)

_LOGS_CLIENTS = RegionalClientRegistry()
_scheduler_client: Optional[Any] = None


def _get_scheduler_client() -> Any:
    global _scheduler_client
    if _scheduler_client is None:
        _scheduler_client = boto3.client("scheduler", config=ADAPTIVE_RETRY_CONFIG)
    return _scheduler_client


@dataclass(frozen=True)
class IntakeContext:
    """Everything one invocation needs, built fresh per invocation."""

    logs_clients: RegionalClientRegistry
    scheduler: DeletionScheduler


def _build_context(settings: EnvSettings) -> IntakeContext:
    scheduler = DeletionScheduler(
        _get_scheduler_client(),
        target_queue_arn=settings.require("deletion_queue_arn"),
        role_arn=settings.require("scheduler_role_arn"),
        delay_days=settings.require("deletion_delay_days"),
        window_minutes=settings.schedule_window_minutes,
    )
    return IntakeContext(logs_clients=_LOGS_CLIENTS, scheduler=scheduler)


def handle_record(invocation: IntakeContext, event: LogGroupCreatedEvent, record: RecordContext) -> None:
    detail = event.detail
    log = bind(record.log, aws_region=detail.aws_region, log_group_name=detail.log_group_name)

    info = fetch_log_group_info(invocation.logs_clients, detail.aws_region, detail.log_group_name, log=log)
    invocation.scheduler.schedule(detail, info, log=log)


def main(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Entry point for SQS batch processing with partial failure reporting.

    Returns a dict: {"batchItemFailures": [{"itemIdentifier": messageId}, ...]}
    """
    corr_id = extract_correlation_id(event, context)
    log = get_logger(__name__, correlation_id=corr_id) if corr_id else logger
    log_event_if_enabled(log, event)

    invocation = _build_context(EnvSettings.load())

    return process_partial_response(
        event,
        lambda parsed, record: handle_record(invocation, parsed, record),
        LogGroupCreatedEvent,
        log=log,
        raise_on_full_batch_failure=False,
    )
