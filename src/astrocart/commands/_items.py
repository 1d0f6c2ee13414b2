"""Parsing for ``product_id:price[:qty]`` cart item arguments."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from astrocart.services.cart import CartStore
    from astrocart.services.result import ServiceResult


def parse_item(raw: str) -> tuple[str, Decimal, int]:
    """Split ``moonstone-ring:499.50:2`` into id, unit price and quantity.

    Raises:
        click.BadParameter: when the value does not have that shape.
    """
    parts = raw.split(":")
    if len(parts) not in (2, 3) or not parts[0].strip():
        msg = f"{raw!r} is not PRODUCT_ID:PRICE[:QTY]"
        raise click.BadParameter(msg)
    try:
        price = Decimal(parts[1])
    except InvalidOperation as exc:
        msg = f"{raw!r} has a non-numeric price"
        raise click.BadParameter(msg) from exc
    if not price.is_finite():
        msg = f"{raw!r} has a non-finite price"
        raise click.BadParameter(msg)
    qty = 1
    if len(parts) == 3:
        try:
            qty = int(parts[2])
        except ValueError as exc:
            msg = f"{raw!r} has a non-integer quantity"
            raise click.BadParameter(msg) from exc
    return parts[0].strip(), price, qty


def items_callback(
    _ctx: click.Context, _param: click.Parameter, value: tuple[str, ...]
) -> list[tuple[str, Decimal, int]]:
    return [parse_item(v) for v in value]


def fill_cart(
    cart: CartStore,
    items: list[tuple[str, Decimal, int]],
    promo_code: str | None = None,
) -> ServiceResult:
    """Add *items* (and optionally a promo) to *cart*.

    Returns the first failing result, or the last successful one with the
    warnings of every step merged in.

    Raises:
        click.UsageError: *items* is empty.
    """
    if not items:
        msg = "At least one PRODUCT_ID:PRICE[:QTY] item is required"
        raise click.UsageError(msg)
    warnings: list[str] = []
    for product_id, price, qty in items:
        result = cart.add_or_increment(product_id, price, qty)
        if not result.ok:
            return result
        warnings.extend(result.warnings)
    if promo_code:
        result = cart.apply_promo(promo_code)
        if not result.ok:
            return result
        warnings.extend(result.warnings)
    return result.model_copy(update={"warnings": warnings})
