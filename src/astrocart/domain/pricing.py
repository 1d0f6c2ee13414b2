"""Price breakdown computation shared by cart, checkout and order summary.

Algorithm (each step quantized to 2 decimals before the next one uses it):

1. subtotal = sum(unit_price * quantity) over lines with quantity > 0
2. raw discount = subtotal * pct / 100, or the fixed amount
3. discount = min(raw discount, subtotal)
4. shipping = 0 if subtotal > free_shipping_threshold else flat_shipping_fee
   (threshold compared against the pre-discount subtotal)
5. tax = (subtotal - discount) * tax_rate
6. total = subtotal - discount + shipping + tax

An empty cart prices to all zeros: no shipping is charged for nothing and
any discount rule is ignored.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel, Field

from astrocart.domain.models import CartLineItem, DiscountKind, DiscountRule, PriceBreakdown
from astrocart.domain.money import ZERO, to_money

FREE_SHIPPING_THRESHOLD = Decimal("1000")
FLAT_SHIPPING_FEE = Decimal("100")
TAX_RATE = Decimal("0.18")


class PricingPolicy(BaseModel):
    """Fixed policy constants fed to the engine."""

    model_config = {"frozen": True}

    free_shipping_threshold: Decimal = Field(default=FREE_SHIPPING_THRESHOLD, ge=0)
    flat_shipping_fee: Decimal = Field(default=FLAT_SHIPPING_FEE, ge=0)
    tax_rate: Decimal = Field(default=TAX_RATE, ge=0, le=1)


def compute_subtotal(items: Iterable[CartLineItem]) -> Decimal:
    """Sum line totals, skipping zero-quantity lines."""
    total = sum(
        (item.unit_price * item.quantity for item in items if item.quantity > 0),
        start=ZERO,
    )
    return to_money(total)


def compute_discount(subtotal: Decimal, rule: DiscountRule | None) -> Decimal:
    """Discount for *subtotal* under *rule*, never exceeding the subtotal."""
    if rule is None:
        return ZERO
    if rule.kind == DiscountKind.PERCENTAGE:
        raw = to_money(subtotal * rule.amount / Decimal(100))
    else:
        raw = to_money(rule.amount)
    return min(raw, subtotal)


class PricingEngine:
    """Pure price breakdown calculator.

    Usage::

        engine = PricingEngine()
        breakdown = engine.compute(items, discount)
    """

    def __init__(self, policy: PricingPolicy | None = None) -> None:
        self.policy = policy or PricingPolicy()

    def shipping_for(self, subtotal: Decimal) -> Decimal:
        """Flat fee unless *subtotal* is strictly above the free threshold."""
        if subtotal > self.policy.free_shipping_threshold:
            return ZERO
        return to_money(self.policy.flat_shipping_fee)

    def compute(
        self,
        items: Iterable[CartLineItem],
        discount: DiscountRule | None = None,
    ) -> PriceBreakdown:
        """Compute the full breakdown for *items* with an optional *discount*."""
        lines = [item for item in items if item.quantity > 0]
        if not lines:
            return PriceBreakdown.zero()

        subtotal = compute_subtotal(lines)
        discount_amount = compute_discount(subtotal, discount)
        shipping = self.shipping_for(subtotal)
        tax = to_money((subtotal - discount_amount) * self.policy.tax_rate)
        total = subtotal - discount_amount + shipping + tax

        return PriceBreakdown(
            subtotal=subtotal,
            discount=discount_amount,
            shipping=shipping,
            tax=tax,
            total=total,
        )
