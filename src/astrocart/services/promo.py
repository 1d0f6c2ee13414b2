"""Standalone promo code checks outside a cart."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from astrocart.domain.money import to_money
from astrocart.services.base import BaseService
from astrocart.services.contracts import PromoCheckData, dump_validated
from astrocart.services.result import ErrorCode, ServiceResult
from astrocart.services.telemetry import traced


class PromoService(BaseService):
    """Look up a code in the shop's catalog without touching any cart."""

    @traced
    def check(self, code: str, subtotal: Decimal | int | str = 0) -> ServiceResult:
        """Report whether *code* would apply to a cart worth *subtotal*."""
        op = "check_promo"
        try:
            amount = to_money(subtotal)
        except (InvalidOperation, ValueError, TypeError):
            return ServiceResult.failure(
                op, ErrorCode.VALIDATION_ERROR, f"Invalid subtotal: {subtotal!r}"
            )

        validation = self._shop.promos.validate(code, amount)
        if validation.error is not None:
            return ServiceResult.failure(
                op, ErrorCode.VALIDATION_ERROR, validation.error, code=validation.code
            )
        if validation.rule is None:
            reason = str(validation.reason)
            return ServiceResult.failure(
                op,
                ErrorCode.PROMO_REJECTED,
                f"Promo code {validation.code} rejected: {reason}",
                code=validation.code,
                reason=reason,
            )

        rule = validation.rule
        data = dump_validated(
            PromoCheckData,
            {"code": rule.code, "kind": str(rule.kind), "amount": str(rule.amount)},
        )
        return ServiceResult(ok=True, op=op, data=data)
