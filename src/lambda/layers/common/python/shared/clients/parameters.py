"""SSM Parameter Store reads with a per-process TTL cache."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Tuple

import boto3

DEFAULT_MAX_AGE_SECONDS = 300


class ParameterStore:
    """Fetches parameters from SSM and caches them for ``max_age`` seconds."""

    def __init__(
        self,
        client_factory: Optional[Callable[[], Any]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client_factory = client_factory or (lambda: boto3.client("ssm"))
        self._client: Any = None
        self._clock = clock
        self._cache: Dict[Tuple[str, bool], Tuple[str, float]] = {}

    def _ssm(self) -> Any:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    def get(self, name: str, *, decrypt: bool = True, max_age: int = DEFAULT_MAX_AGE_SECONDS) -> str:
        key = (name, decrypt)
        cached = self._cache.get(key)
        now = self._clock()
        if cached is not None and cached[1] > now:
            return cached[0]

        response = self._ssm().get_parameter(Name=name, WithDecryption=decrypt)
        value = str(response.get("Parameter", {}).get("Value") or "")
        if max_age > 0:
            self._cache[key] = (value, now + max_age)
        return value

    def clear_cache(self) -> None:
        self._cache.clear()
