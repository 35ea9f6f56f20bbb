"""SQS batch processing with partial failure reporting."""

from .processor import RecordContext, process_partial_response  # noqa: F401

__all__ = ["RecordContext", "process_partial_response"]
