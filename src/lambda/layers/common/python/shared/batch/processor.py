"""SQS batch processing with partial batch failure semantics.

Each record is parsed and handled independently; the response lists only the
message ids that failed so the queue redelivers just those.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Type, TypeVar

from pydantic import BaseModel

from shared.errors import FullBatchFailureError
from shared.utils.logger import bind
from shared.validation import parse_model

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class RecordContext:
    """Per-record values handed to the record handler."""

    message_id: str
    receive_count: int
    log: logging.LoggerAdapter


class RecordParseError(ValueError):
    """Record body did not match the expected model."""


def _receive_count(record: Dict[str, Any]) -> int:
    raw = (record.get("attributes") or {}).get("ApproximateReceiveCount")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 1


def process_partial_response(
    event: Dict[str, Any],
    record_handler: Callable[[Any, RecordContext], None],
    model: Type[ModelT],
    *,
    log: logging.LoggerAdapter,
    raise_on_full_batch_failure: bool = True,
) -> Dict[str, List[Dict[str, str]]]:
    """Run ``record_handler`` over every SQS record of ``event``.

    Returns ``{"batchItemFailures": [{"itemIdentifier": messageId}, ...]}``.
    Raises FullBatchFailureError when every record of a non-empty batch failed
    and ``raise_on_full_batch_failure`` is set.
    """
    records: List[Dict[str, Any]] = list(event.get("Records") or [])
    failures: List[Dict[str, str]] = []
    errors: List[BaseException] = []

    for record in records:
        msg_id = record.get("messageId") or record.get("messageID") or "unknown"
        receive_count = _receive_count(record)
        record_log = bind(log, message_id=msg_id, receive_count=receive_count)

        parsed = parse_model(record.get("body"), model)
        if not parsed.ok:
            record_log.error("Invalid record body", extra={"reason": parsed.error})
            failures.append({"itemIdentifier": msg_id})
            errors.append(RecordParseError(parsed.error))
            continue

        ctx = RecordContext(message_id=msg_id, receive_count=receive_count, log=record_log)
        try:
            record_handler(parsed.value, ctx)
        except Exception as exc:
            record_log.exception("Failed to process record")
            failures.append({"itemIdentifier": msg_id})
            errors.append(exc)

    if records and len(failures) == len(records) and raise_on_full_batch_failure:
        raise FullBatchFailureError(errors)

    if failures:
        log.warning(
            "Batch processed with failures",
            extra={"failed": len(failures), "total": len(records)},
        )
    else:
        log.info("Batch processed", extra={"total": len(records)})
    return {"batchItemFailures": failures}
