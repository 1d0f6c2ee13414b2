"""Command group: checkout, order history, status changes and tracking."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import click

from astrocart.commands._base import ShopGroup
from astrocart.commands._items import fill_cart, items_callback
from astrocart.domain.lifecycle import OrderStatus
from astrocart.services.orders import OrderService

if TYPE_CHECKING:
    from astrocart.commands._context import AppContext

_ORDER_EXAMPLES = """\
  astrocart order place gemstone-ring:500:2 --name "Asha Rao" --line1 "12 MG Road" \\
      --city Bengaluru --state Karnataka --pincode 560001 --phone 9876543210 --payment upi
  astrocart order list --status pending
  astrocart order show ORD-1A2B3C4D5E
  astrocart order advance ORD-1A2B3C4D5E confirmed
  astrocart order cancel ORD-1A2B3C4D5E
  astrocart order track ORD-1A2B3C4D5E"""

_STATUS_CHOICES = [str(s) for s in OrderStatus]


@click.group(cls=ShopGroup, examples=_ORDER_EXAMPLES)
@click.pass_obj
def order(app: AppContext) -> None:
    """Place, list, advance, cancel and track orders."""


@order.command(
    examples="""\
  astrocart order place gemstone-ring:500:2 --name "Asha Rao" --line1 "12 MG Road" \\
      --city Bengaluru --state Karnataka --pincode 560001 --phone 9876543210 --payment cod
  astrocart order place tarot-deck:799 --promo WELCOME10 --name "Asha Rao" \\
      --line1 "12 MG Road" --line2 "Flat 4B" --city Bengaluru --state Karnataka \\
      --pincode 560001 --phone "+91 98765 43210" --payment card:tok_4242"""
)
@click.argument("items", nargs=-1, required=True, callback=items_callback)
@click.option("--name", "full_name", required=True, help="Recipient full name.")
@click.option("--line1", "address_line1", required=True, help="Address line 1.")
@click.option("--line2", "address_line2", default=None, help="Address line 2.")
@click.option("--city", required=True, help="City.")
@click.option("--state", required=True, help="State.")
@click.option("--pincode", required=True, help="6-digit PIN code.")
@click.option("--phone", required=True, help="10-digit phone number.")
@click.option(
    "--payment",
    "payment_method_ref",
    required=True,
    help="Payment method: card, upi or cod, optionally METHOD:TOKEN.",
)
@click.option("--promo", "promo_code", default=None, help="Promo code to apply.")
@click.pass_obj
def place(
    app: AppContext,
    items: list[tuple[str, Decimal, int]],
    full_name: str,
    address_line1: str,
    address_line2: str | None,
    city: str,
    state: str,
    pincode: str,
    phone: str,
    payment_method_ref: str,
    promo_code: str | None,
) -> None:
    """Place an order for ITEMS (PRODUCT_ID:PRICE[:QTY])."""
    filled = fill_cart(app.cart, items, promo_code)
    if not filled.ok:
        app.emit(filled)
        return
    address = {
        "full_name": full_name,
        "address_line1": address_line1,
        "address_line2": address_line2,
        "city": city,
        "state": state,
        "pincode": pincode,
        "phone": phone,
    }
    result = OrderService(app.shop).place_order(app.cart, address, payment_method_ref)
    if result.ok and filled.warnings:
        result = result.model_copy(update={"warnings": [*filled.warnings, *result.warnings]})
    app.emit(result)


@order.command(
    examples="""\
  astrocart order show ORD-1A2B3C4D5E
  astrocart --json order show ORD-1A2B3C4D5E"""
)
@click.argument("order_id")
@click.pass_obj
def show(app: AppContext, order_id: str) -> None:
    """Show one order with its price breakdown."""
    app.emit(OrderService(app.shop).get_order(order_id))


@order.command(
    name="list",
    examples="""\
  astrocart order list
  astrocart order list --status delivered
  astrocart -q order list --status pending""",
)
@click.option(
    "--status",
    type=click.Choice(["all", *_STATUS_CHOICES]),
    default="all",
    help="Only orders in this status.",
)
@click.pass_obj
def list_cmd(app: AppContext, status: str) -> None:
    """List orders, newest first."""
    app.emit(OrderService(app.shop).list_orders(status))


@order.command(
    examples="""\
  astrocart order advance ORD-1A2B3C4D5E confirmed
  astrocart order advance ORD-1A2B3C4D5E shipped"""
)
@click.argument("order_id")
@click.argument("status", type=click.Choice(_STATUS_CHOICES))
@click.pass_obj
def advance(app: AppContext, order_id: str, status: str) -> None:
    """Move an order to STATUS."""
    app.emit(OrderService(app.shop).advance(order_id, status))


@order.command(
    examples="""\
  astrocart order cancel ORD-1A2B3C4D5E"""
)
@click.argument("order_id")
@click.pass_obj
def cancel(app: AppContext, order_id: str) -> None:
    """Cancel a pending or confirmed order."""
    app.emit(OrderService(app.shop).cancel(order_id))


@order.command(
    examples="""\
  astrocart order track ORD-1A2B3C4D5E
  astrocart --json order track ORD-1A2B3C4D5E"""
)
@click.argument("order_id")
@click.pass_obj
def track(app: AppContext, order_id: str) -> None:
    """Show the delivery tracking timeline."""
    app.emit(OrderService(app.shop).track(order_id))
