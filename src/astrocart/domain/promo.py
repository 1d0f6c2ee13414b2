"""Promo code validation against a catalog.

The validator is a pure lookup: it never stores the rule it yields and
holds no state between calls.  The cart decides what to do with the
result.

Check order: malformed code, already applied, unknown or inactive,
expired, below the minimum spend.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator

from astrocart.domain.models import DiscountKind, DiscountRule

CODE_PATTERN: re.Pattern[str] = re.compile(r"^[A-Z0-9][A-Z0-9_-]{0,31}$")


class RejectionReason(StrEnum):
    """Why a well-formed promo code was not accepted."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    ALREADY_APPLIED = "already_applied"
    BELOW_MINIMUM = "below_minimum"


class PromoCatalogEntry(BaseModel):
    """One promo code as published by the shop backend."""

    model_config = {"frozen": True}

    kind: DiscountKind
    amount: Decimal = Field(ge=0)
    expires_at: datetime | None = None
    min_subtotal: Decimal | None = Field(default=None, ge=0)
    active: bool = True

    @field_validator("expires_at", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def _check_percentage(self) -> PromoCatalogEntry:
        if self.kind == DiscountKind.PERCENTAGE and self.amount > 100:
            msg = f"Percentage discount must be within 0-100, got {self.amount}"
            raise ValueError(msg)
        return self


@dataclass(frozen=True)
class PromoValidation:
    """Outcome of validating one code.

    Exactly one of ``rule``, ``reason`` or ``error`` is set.
    """

    code: str
    rule: DiscountRule | None = None
    reason: RejectionReason | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.rule is not None


def normalize_code(raw: str) -> str:
    """Trim and upper-case a user-typed code."""
    return raw.strip().upper()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PromoCodeValidator:
    """Validate codes against a catalog keyed by normalized code."""

    def __init__(
        self,
        catalog: Mapping[str, PromoCatalogEntry],
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._catalog = {normalize_code(code): entry for code, entry in catalog.items()}
        self._clock = clock

    def validate(
        self,
        code: str,
        subtotal: Decimal,
        *,
        applied_code: str | None = None,
    ) -> PromoValidation:
        """Validate *code* for a cart worth *subtotal*.

        Args:
            code: Raw code as typed; normalized here.
            subtotal: Pre-discount subtotal, used by minimum-spend rules.
            applied_code: Code currently held by the cart, if any.
        """
        normalized = normalize_code(code)
        if not CODE_PATTERN.match(normalized):
            return PromoValidation(
                code=normalized,
                error=f"Malformed promo code: {code!r}",
            )

        if not subtotal.is_finite():
            return PromoValidation(code=normalized, error=f"Invalid subtotal: {subtotal}")

        if applied_code is not None and normalize_code(applied_code) == normalized:
            return PromoValidation(code=normalized, reason=RejectionReason.ALREADY_APPLIED)

        entry = self._catalog.get(normalized)
        if entry is None or not entry.active:
            return PromoValidation(code=normalized, reason=RejectionReason.NOT_FOUND)

        if entry.expires_at is not None and entry.expires_at <= self._clock():
            return PromoValidation(code=normalized, reason=RejectionReason.EXPIRED)

        if entry.min_subtotal is not None and subtotal < entry.min_subtotal:
            return PromoValidation(code=normalized, reason=RejectionReason.BELOW_MINIMUM)

        rule = DiscountRule(code=normalized, kind=entry.kind, amount=entry.amount)
        return PromoValidation(code=normalized, rule=rule)
