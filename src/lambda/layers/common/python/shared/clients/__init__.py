"""Shared AWS client facades.

Clients are created lazily and reused for the lifetime of the Lambda
execution environment.
"""

from __future__ import annotations

from .cloudwatch_logs import (
    ADAPTIVE_RETRY_CONFIG,
    RegionalClientRegistry,
    delete_log_group,
    fetch_log_group_info,
)
from .parameters import ParameterStore

__all__ = [
    "ADAPTIVE_RETRY_CONFIG",
    "ParameterStore",
    "RegionalClientRegistry",
    "delete_log_group",
    "fetch_log_group_info",
]
