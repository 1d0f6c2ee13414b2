"""Command group: promo code lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from astrocart.commands._base import ShopGroup

if TYPE_CHECKING:
    from astrocart.commands._context import AppContext


@click.group(
    cls=ShopGroup,
    examples="""\
  astrocart promo check WELCOME10
  astrocart promo check BIGSPEND --subtotal 2500""",
)
@click.pass_obj
def promo(app: AppContext) -> None:
    """Check promo codes against the shop catalog."""


@promo.command(
    examples="""\
  astrocart promo check WELCOME10
  astrocart promo check flat200 --subtotal 1500
  astrocart --json promo check DIWALI"""
)
@click.argument("code")
@click.option("--subtotal", default="0", help="Cart subtotal for minimum-spend codes.")
@click.pass_obj
def check(app: AppContext, code: str, subtotal: str) -> None:
    """Report whether CODE is valid right now."""
    from astrocart.services.promo import PromoService

    app.emit(PromoService(app.shop).check(code, subtotal))
