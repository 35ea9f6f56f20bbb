"""Validation utilities exposed by the shared layer.

Canonical import path:
    from shared.validation import ParseResult, parse_model
"""

from .parsing import ParseResult, parse_model  # noqa: F401

__all__ = ["ParseResult", "parse_model"]
