"""SQS deletion Lambda: deletes log groups whose deletion schedule fired.

Message body: {"logGroupName": str, "awsRegion": str}. A log group that is
already gone counts as deleted. When every record of the batch fails the
invocation raises FullBatchFailureError.
"""

from __future__ import annotations

from typing import Any, Dict

from shared.batch import RecordContext, process_partial_response
from shared.clients import RegionalClientRegistry, delete_log_group
from shared.models import DeletionMessage
from shared.utils.logger import bind, extract_correlation_id, get_logger, log_event_if_enabled


logger = get_logger(__name__)

_LOGS_CLIENTS = RegionalClientRegistry()


def handle_record(message: DeletionMessage, record: RecordContext) -> None:
    log = bind(record.log, log_group_name=message.log_group_name, aws_region=message.aws_region)
    log.info("Deleting log group")
    delete_log_group(_LOGS_CLIENTS, message.aws_region, message.log_group_name, log=log)


def main(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Entry point for SQS batch processing with partial failure reporting."""
    corr_id = extract_correlation_id(event, context)
    log = get_logger(__name__, correlation_id=corr_id) if corr_id else logger
    log_event_if_enabled(log, event)

    return process_partial_response(event, handle_record, DeletionMessage, log=log)
