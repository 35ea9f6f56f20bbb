"""CloudWatch Logs access: per-region client registry, lookup and delete."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from shared.errors import LogGroupNotFoundError
from shared.models.events import LogGroupInfo

ADAPTIVE_RETRY_CONFIG = Config(retries={"mode": "adaptive", "max_attempts": 5})

ClientFactory = Callable[[str], Any]


def _default_factory(region: str) -> Any:
    return boto3.client("logs", region_name=region, config=ADAPTIVE_RETRY_CONFIG)


class RegionalClientRegistry:
    """Memoises one CloudWatch Logs client per region.

    Entries are never invalidated; a Lambda execution environment keeps them
    until it is recycled.
    """

    def __init__(self, factory: Optional[ClientFactory] = None) -> None:
        self._factory: ClientFactory = factory or _default_factory
        self._clients: Dict[str, Any] = {}

    def get(self, region: str) -> Any:
        client = self._clients.get(region)
        if client is None:
            client = self._factory(region)
            self._clients[region] = client
        return client

    def clear(self) -> None:
        self._clients.clear()

    def __contains__(self, region: object) -> bool:
        return region in self._clients

    def __len__(self) -> int:
        return len(self._clients)


def fetch_log_group_info(
    clients: RegionalClientRegistry,
    region: str,
    log_group_name: str,
    *,
    log: Optional[logging.LoggerAdapter] = None,
) -> LogGroupInfo:
    """Return retention info for the log group named exactly ``log_group_name``.

    The describe call filters by prefix, so other log groups sharing the
    prefix are skipped. Raises LogGroupNotFoundError when there is no exact match.
    """
    paginator = clients.get(region).get_paginator("describe_log_groups")
    for page in paginator.paginate(logGroupNamePrefix=log_group_name):
        for group in page.get("logGroups", []):
            if group.get("logGroupName") == log_group_name:
                if log is not None:
                    log.debug("Log group info", extra={"log_group": group})
                return LogGroupInfo(
                    log_group_name=log_group_name,
                    retention_in_days=group.get("retentionInDays"),
                )
    if log is not None:
        log.error("Log group not found or does not exist")
    raise LogGroupNotFoundError(log_group_name, region)


def delete_log_group(
    clients: RegionalClientRegistry,
    region: str,
    log_group_name: str,
    *,
    log: logging.LoggerAdapter,
) -> bool:
    """Delete a log group. Returns False when it was already gone."""
    try:
        clients.get(region).delete_log_group(logGroupName=log_group_name)
    except ClientError as exc:
        if exc.response.get("Error", {}).get("Code") == "ResourceNotFoundException":
            log.warning("Log group already deleted")
            return False
        raise
    log.info("Successfully deleted log group")
    return True
