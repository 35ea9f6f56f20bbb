"""Parse boundary between raw queue payloads and typed models.

Returns a tagged ``ParseResult`` instead of raising, so callers can record
the failure per item without wrapping business logic in try/except.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class ParseResult(Generic[ModelT]):
    value: Optional[ModelT] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None


def parse_model(raw: Any, model: Type[ModelT]) -> ParseResult[ModelT]:
    """Decode ``raw`` (JSON text or an already decoded dict) into ``model``."""
    payload = raw
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            return ParseResult(error=f"Body is not valid JSON: {exc}")
    if not isinstance(payload, dict):
        return ParseResult(error=f"Expected a JSON object, got {type(payload).__name__}")
    try:
        return ParseResult(value=model.model_validate(payload))
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        return ParseResult(error=f"{model.__name__} validation failed for: {', '.join(fields)}")
