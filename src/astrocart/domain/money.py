"""Money arithmetic on Decimal, quantized to two places.

INVARIANT: Every amount that leaves the pricing layer has passed through
``to_money`` so sums of rounded parts reconcile exactly.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Quantize *value* to two decimals, rounding half away from zero.

    Floats are converted through ``str`` so ``0.1`` becomes ``0.10`` rather
    than its binary expansion.

    Raises:
        ValueError: *value* is NaN or infinite.
        decimal.InvalidOperation: *value* is not a number at all.

    Examples:
        >>> to_money("10.005")
        Decimal('10.01')
        >>> to_money(1280)
        Decimal('1280.00')
    """
    if isinstance(value, float):
        value = str(value)
    amount = Decimal(value)
    if not amount.is_finite():
        msg = f"Amount must be a finite number, got {value!r}"
        raise ValueError(msg)
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal, symbol: str = "₹") -> str:
    """Render *amount* for display, e.g. ``₹1280.00``."""
    return f"{symbol}{to_money(amount):.2f}"
