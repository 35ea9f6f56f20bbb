"""Lightweight JSON logger utility for Lambdas.

Provides a consistent logger adapter that emits one JSON object per line with
environment, correlation_id and any bound or per-call extra fields.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "timestamp": record.created,
        }
        env = getattr(record, "environment", None) or os.environ.get("ENVIRONMENT")
        if env:
            payload["environment"] = env
        for key, value in record.__dict__.items():
            if key in _RESERVED or key in payload or value is None:
                continue
            payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class _Adapter(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: Dict[str, Any]):  # type: ignore[override]
        extra = self.extra.copy() if isinstance(self.extra, dict) else {}
        if "extra" in kwargs and isinstance(kwargs["extra"], dict):
            extra.update(kwargs["extra"])  # merge per-call extras
        kwargs["extra"] = extra
        return msg, kwargs


def _level() -> int:
    name = (os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
    return getattr(logging, name, logging.INFO)


def get_logger(name: str, correlation_id: Optional[str] = None) -> logging.LoggerAdapter:
    """Return a JSON-formatted logger adapter with optional correlation_id."""
    base = logging.getLogger(name)
    if not base.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        base.addHandler(handler)
        base.propagate = False
    base.setLevel(_level())
    extras: Dict[str, Any] = {"environment": os.environ.get("ENVIRONMENT")}
    if correlation_id:
        extras["correlation_id"] = correlation_id
    return _Adapter(base, extras)


def bind(log: logging.LoggerAdapter, **keys: Any) -> logging.LoggerAdapter:
    """Return a new adapter carrying the parent's keys plus ``keys``."""
    extras = dict(log.extra) if isinstance(log.extra, dict) else {}
    extras.update(keys)
    return _Adapter(log.logger, extras)


def log_event_if_enabled(log: logging.LoggerAdapter, event: Any) -> None:
    """Log the raw incoming event when LOG_EVENT=true."""
    if (os.environ.get("LOG_EVENT") or "").strip().lower() in ("1", "true", "yes"):
        log.info("Received event", extra={"event": event})


def extract_correlation_id(event: Optional[Dict[str, Any]], context: Any = None) -> Optional[str]:
    """Try to extract a correlation id from common event shapes.

    Falls back to the Lambda request id when the event carries none.
    """
    if isinstance(event, dict):
        for key in ("correlation_id", "CorrelationId", "id"):
            val = event.get(key)
            if isinstance(val, str) and val:
                return val
        # CloudWatch alarm action payloads
        alarm_arn = event.get("alarmArn")
        time = event.get("time")
        if isinstance(alarm_arn, str) and alarm_arn and isinstance(time, str):
            return f"{alarm_arn}@{time}"
    request_id = getattr(context, "aws_request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    return None
