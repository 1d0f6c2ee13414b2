"""Command: price a basket without placing an order."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import click

from astrocart.commands._base import ShopCommand
from astrocart.commands._items import fill_cart, items_callback

if TYPE_CHECKING:
    from astrocart.commands._context import AppContext


@click.command(
    cls=ShopCommand,
    examples="""\
  astrocart quote gemstone-ring:500:2
  astrocart quote gemstone-ring:500:2 --promo WELCOME10
  astrocart quote rudraksha:349 tarot-deck:799 yantra:1250.50
  astrocart --json quote gemstone-ring:500:2""",
)
@click.argument("items", nargs=-1, required=True, callback=items_callback)
@click.option("--promo", "promo_code", default=None, help="Promo code to apply.")
@click.pass_obj
def quote(
    app: AppContext,
    items: list[tuple[str, Decimal, int]],
    promo_code: str | None,
) -> None:
    """Show the price breakdown for ITEMS (PRODUCT_ID:PRICE[:QTY])."""
    result = fill_cart(app.cart, items, promo_code)
    if result.ok:
        result = result.model_copy(update={"op": "quote"})
    app.emit(result)
