"""Tests for Decimal money helpers."""

from decimal import Decimal, InvalidOperation

import pytest

from astrocart.domain.money import ZERO, format_money, to_money


class TestToMoney:
    def test_quantizes_integers(self) -> None:
        assert to_money(1280) == Decimal("1280.00")
        assert str(to_money(1280)) == "1280.00"

    def test_rounds_half_up(self) -> None:
        assert to_money("10.005") == Decimal("10.01")
        assert to_money("10.004") == Decimal("10.00")

    def test_float_goes_through_str(self) -> None:
        assert to_money(0.1) == Decimal("0.10")
        assert to_money(2.675) == Decimal("2.68")

    def test_zero_constant(self) -> None:
        assert to_money(0) == ZERO


class TestFormatMoney:
    def test_default_rupee_symbol(self) -> None:
        assert format_money(Decimal("1280")) == "₹1280.00"

    def test_custom_symbol(self) -> None:
        assert format_money(Decimal("99.5"), symbol="$") == "$99.50"


class TestNonFiniteAmounts:
    @pytest.mark.parametrize("raw", ["NaN", "nan", "sNaN", "Infinity", "-Infinity", float("inf")])
    def test_rejected(self, raw: str | float) -> None:
        with pytest.raises(ValueError, match="finite"):
            to_money(raw)

    def test_garbage_is_invalid_operation(self) -> None:
        with pytest.raises(InvalidOperation):
            to_money("lots")
