"""Field helpers shared by the request schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator

from ..models import ensure_utc

MAX_FREE_TEXT_LENGTH = 1000
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


def sanitize_text(value: Any) -> Any:
    """Strip angle brackets and surrounding whitespace from user text."""
    if not isinstance(value, str):
        return value
    return value.replace("<", "").replace(">", "").strip()


def sanitize_long_text(value: Any) -> Any:
    cleaned = sanitize_text(value)
    if isinstance(cleaned, str):
        return cleaned[:MAX_FREE_TEXT_LENGTH] or None
    return cleaned


CleanStr = Annotated[str, BeforeValidator(sanitize_text)]
LongText = Annotated[str | None, BeforeValidator(sanitize_long_text)]
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


def reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("Field may not be null.")
    return value


__all__ = [
    "CleanStr",
    "HEX_COLOR_PATTERN",
    "LongText",
    "MAX_FREE_TEXT_LENGTH",
    "UtcDatetime",
    "reject_null",
    "sanitize_long_text",
    "sanitize_text",
]
