"""Tests for the price breakdown algorithm."""

from decimal import Decimal

import pytest

from astrocart.domain.models import CartLineItem, DiscountKind, DiscountRule, PriceBreakdown
from astrocart.domain.pricing import (
    PricingEngine,
    PricingPolicy,
    compute_discount,
    compute_subtotal,
)


def _line(product_id: str, price: str, qty: int) -> CartLineItem:
    return CartLineItem(product_id=product_id, unit_price=Decimal(price), quantity=qty)


def _pct(amount: str) -> DiscountRule:
    return DiscountRule(code="PCT", kind=DiscountKind.PERCENTAGE, amount=Decimal(amount))


def _fixed(amount: str) -> DiscountRule:
    return DiscountRule(code="FIX", kind=DiscountKind.FIXED, amount=Decimal(amount))


@pytest.fixture
def engine() -> PricingEngine:
    return PricingEngine()


class TestBreakdown:
    def test_threshold_cart_pays_shipping(self, engine: PricingEngine) -> None:
        """Subtotal exactly at the threshold is not free shipping."""
        b = engine.compute([_line("ring", "500", 2)])
        assert b.subtotal == Decimal("1000.00")
        assert b.discount == Decimal("0.00")
        assert b.shipping == Decimal("100.00")
        assert b.tax == Decimal("180.00")
        assert b.total == Decimal("1280.00")

    def test_percentage_discount(self, engine: PricingEngine) -> None:
        b = engine.compute([_line("ring", "500", 2)], _pct("10"))
        assert b.discount == Decimal("100.00")
        assert b.shipping == Decimal("100.00")
        assert b.tax == Decimal("162.00")
        assert b.total == Decimal("1162.00")

    def test_shipping_uses_pre_discount_subtotal(self, engine: PricingEngine) -> None:
        b = engine.compute([_line("ring", "1200", 1)], _fixed("300"))
        assert b.shipping == Decimal("0.00")
        assert b.tax == Decimal("162.00")
        assert b.total == Decimal("1062.00")

    def test_just_over_threshold_is_free(self, engine: PricingEngine) -> None:
        b = engine.compute([_line("ring", "1000.01", 1)])
        assert b.shipping == Decimal("0.00")

    def test_discount_capped_at_subtotal(self, engine: PricingEngine) -> None:
        b = engine.compute([_line("candle", "150", 1)], _fixed("200"))
        assert b.discount == Decimal("150.00")
        assert b.tax == Decimal("0.00")
        assert b.total == Decimal("100.00")

    def test_full_percentage_discount(self, engine: PricingEngine) -> None:
        b = engine.compute([_line("candle", "150", 1)], _pct("100"))
        assert b.discount == b.subtotal
        assert b.total == b.shipping

    def test_zero_quantity_lines_are_ignored(self, engine: PricingEngine) -> None:
        b = engine.compute([_line("ring", "500", 2), _line("deck", "799", 0)])
        assert b.subtotal == Decimal("1000.00")

    def test_empty_cart_is_all_zero(self, engine: PricingEngine) -> None:
        b = engine.compute([], _pct("10"))
        assert b == PriceBreakdown.zero()
        assert b.shipping == Decimal("0")

    def test_only_zero_quantity_lines_is_empty(self, engine: PricingEngine) -> None:
        assert engine.compute([_line("ring", "500", 0)]) == PriceBreakdown.zero()

    def test_components_rounded_before_total(self, engine: PricingEngine) -> None:
        b = engine.compute([_line("incense", "33.33", 3)], _pct("15"))
        assert b.subtotal == Decimal("99.99")
        assert b.discount == Decimal("15.00")
        assert b.tax == Decimal("15.30")
        assert b.total == b.subtotal - b.discount + b.shipping + b.tax
        assert b.is_reconciled

    @pytest.mark.parametrize(
        ("lines", "rule"),
        [
            ([("a", "0.01", 1)], None),
            ([("a", "999.99", 1), ("b", "0.01", 1)], _pct("33")),
            ([("a", "12.34", 7), ("b", "45.67", 3)], _fixed("10.10")),
            ([("a", "2500", 4)], _pct("7.5")),
        ],
    )
    def test_reconciles(
        self,
        engine: PricingEngine,
        lines: list[tuple[str, str, int]],
        rule: DiscountRule | None,
    ) -> None:
        b = engine.compute([_line(*line) for line in lines], rule)
        assert b.is_reconciled
        assert b.discount <= b.subtotal


class TestPolicy:
    def test_custom_policy(self) -> None:
        engine = PricingEngine(
            PricingPolicy(
                free_shipping_threshold=Decimal("499"),
                flat_shipping_fee=Decimal("49"),
                tax_rate=Decimal("0.05"),
            )
        )
        b = engine.compute([_line("deck", "400", 1)])
        assert b.shipping == Decimal("49.00")
        assert b.tax == Decimal("20.00")
        assert b.total == Decimal("469.00")

    def test_shipping_for(self) -> None:
        engine = PricingEngine()
        assert engine.shipping_for(Decimal("1000")) == Decimal("100.00")
        assert engine.shipping_for(Decimal("1000.01")) == Decimal("0.00")


class TestHelpers:
    def test_compute_subtotal(self) -> None:
        assert compute_subtotal([_line("a", "10.50", 2), _line("b", "1", 3)]) == Decimal("24.00")

    def test_compute_discount_without_rule(self) -> None:
        assert compute_discount(Decimal("500.00"), None) == Decimal("0.00")
