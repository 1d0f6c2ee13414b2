"""Typed payload contracts for service and adapter boundaries.

These models validate operation payload shapes before they leave the
service layer, so a renamed key (``items`` vs ``lines``) fails fast in
tests rather than in a screen.  Payloads are dumped in JSON mode: money
travels as ``"1280.00"`` strings, timestamps as ISO 8601.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from astrocart.domain.models import (
    CartLineItem,
    Order,
    PriceBreakdown,
    TrackingStep,
)


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="json")


class CartLineData(BaseModel):
    """One cart line as shown on the cart screen."""

    model_config = ConfigDict(extra="forbid")

    product_id: str
    name: str | None = None
    variant: dict[str, str] | None = None
    unit_price: str
    quantity: int
    line_total: str


class CartResultData(BaseModel):
    """Payload contract for every ``CartStore`` mutation."""

    items: list[CartLineData]
    breakdown: PriceBreakdown
    promo_code: str | None = None
    item_count: int


class PromoCheckData(BaseModel):
    """Payload contract for a successful promo validation."""

    code: str
    kind: Literal["percentage", "fixed"]
    amount: str


class OrderSummaryItem(BaseModel):
    """One row of the order history list."""

    id: str
    status: str
    placed_at: str
    item_count: int
    total: str


class OrderListResultData(BaseModel):
    """Payload contract for ``OrderService.list_orders``."""

    count: int
    status_filter: str | None = None
    items: list[OrderSummaryItem]


class OrderResultData(BaseModel):
    """Payload contract for order placement and lookup."""

    order: Order
    cancellable: bool


class TransitionResultData(BaseModel):
    """Payload contract for ``OrderLifecycle.transition``."""

    order_id: str
    from_status: str
    to_status: str
    at: str
    step: TrackingStep
    order: Order


class TimelineResultData(BaseModel):
    """Payload contract for ``OrderService.track``."""

    order_id: str
    status: str
    steps: list[TrackingStep]


def cart_line_payload(item: CartLineItem) -> dict[str, Any]:
    """Serialize a cart line with its computed line total."""
    return {
        "product_id": item.product_id,
        "name": item.name,
        "variant": item.variant.model_dump() if item.variant else None,
        "unit_price": str(item.unit_price),
        "quantity": item.quantity,
        "line_total": str(item.line_total),
    }


def order_summary_payload(order: Order) -> dict[str, Any]:
    """Serialize an order for the history list."""
    return {
        "id": order.id,
        "status": str(order.status),
        "placed_at": order.placed_at.isoformat(),
        "item_count": order.item_count,
        "total": str(order.breakdown.total),
    }
