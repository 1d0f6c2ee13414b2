"""Tests for shop entity models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from astrocart.domain.models import (
    CartLineItem,
    DiscountKind,
    DiscountRule,
    PaymentMethod,
    PriceBreakdown,
    ShippingAddress,
    Variant,
    parse_payment_ref,
)


class TestCartLineItem:
    def test_price_quantized(self) -> None:
        line = CartLineItem(product_id="ring", unit_price=Decimal("499.5"), quantity=2)
        assert str(line.unit_price) == "499.50"
        assert line.line_total == Decimal("999.00")

    def test_frozen(self) -> None:
        line = CartLineItem(product_id="ring", unit_price=Decimal("1"), quantity=1)
        with pytest.raises(ValidationError):
            line.quantity = 3  # type: ignore[misc]

    def test_rejects_negative_values(self) -> None:
        with pytest.raises(ValidationError):
            CartLineItem(product_id="ring", unit_price=Decimal("-1"), quantity=1)
        with pytest.raises(ValidationError):
            CartLineItem(product_id="ring", unit_price=Decimal("1"), quantity=-1)

    def test_variant(self) -> None:
        line = CartLineItem(
            product_id="tee",
            unit_price=Decimal("1"),
            quantity=1,
            variant=Variant(name="size", value="M"),
        )
        assert line.variant == Variant(name="size", value="M")


class TestDiscountRule:
    def test_percentage_bounds(self) -> None:
        DiscountRule(code="ALL", kind=DiscountKind.PERCENTAGE, amount=Decimal("100"))
        with pytest.raises(ValidationError):
            DiscountRule(code="TOO", kind=DiscountKind.PERCENTAGE, amount=Decimal("100.01"))

    def test_fixed_can_exceed_100(self) -> None:
        rule = DiscountRule(code="BIG", kind=DiscountKind.FIXED, amount=Decimal("500"))
        assert rule.amount == Decimal("500")


class TestPriceBreakdown:
    def test_zero(self) -> None:
        zero = PriceBreakdown.zero()
        assert zero.total == Decimal("0")
        assert zero.is_reconciled

    def test_unreconciled(self) -> None:
        b = PriceBreakdown(
            subtotal=Decimal("10"),
            discount=Decimal("0"),
            shipping=Decimal("0"),
            tax=Decimal("0"),
            total=Decimal("11"),
        )
        assert not b.is_reconciled


class TestShippingAddress:
    def _valid(self, **overrides: str) -> dict[str, str]:
        data = {
            "full_name": " Asha Rao ",
            "address_line1": "12 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560001",
            "phone": "+91 98765 43210",
        }
        data.update(overrides)
        return data

    def test_normalizes(self) -> None:
        address = ShippingAddress.model_validate(self._valid())
        assert address.full_name == "Asha Rao"
        assert address.phone == "9876543210"
        assert address.address_line2 is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"full_name": "   "},
            {"city": ""},
            {"pincode": "56001"},
            {"pincode": "5600O1"},
            {"phone": "12345"},
        ],
    )
    def test_rejects(self, overrides: dict[str, str]) -> None:
        with pytest.raises(ValidationError):
            ShippingAddress.model_validate(self._valid(**overrides))


class TestPaymentRef:
    def test_plain_method(self) -> None:
        assert parse_payment_ref("cod") == PaymentMethod.COD

    def test_method_with_token(self) -> None:
        assert parse_payment_ref("card:tok_4242") == PaymentMethod.CARD
        assert parse_payment_ref("UPI:asha@okbank") == PaymentMethod.UPI

    def test_unknown(self) -> None:
        assert parse_payment_ref("bitcoin") is None
        assert parse_payment_ref("") is None
