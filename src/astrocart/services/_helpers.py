"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError


def now_iso() -> str:
    """Current UTC time as standard ISO 8601."""
    return datetime.now(UTC).isoformat()


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one ``field: message; ...`` line.

    Examples:
        ``pincode: Value error, pincode must be 6 digits``
    """
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "value"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def validation_fields(exc: ValidationError) -> list[dict[str, Any]]:
    """Field/message pairs for ``ServiceError.detail``."""
    return [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
