"""Shop entities: cart lines, discount rules, price breakdowns and orders.

Every entity is a pydantic model so it round-trips through the JSON the
surrounding app exchanges with its backend.  Money fields are Decimal and
are quantized to two places on the way in.

Frozen models (cart lines, rules, breakdowns, snapshots) are values: a
change produces a new instance.  ``Order`` is the one mutable entity, and
only its ``status`` / ``status_history`` ever change after creation.
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field, field_validator, model_validator

from astrocart.domain.lifecycle import OrderStatus
from astrocart.domain.money import ZERO, to_money

# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


class Variant(BaseModel):
    """A product option chosen in the shop, e.g. ``size = M``."""

    model_config = {"frozen": True}

    name: str
    value: str


class CartLineItem(BaseModel):
    """One product line in the cart.

    ``unit_price`` is captured when the line is first added and never
    changes afterwards; re-fetch the product to pick up a new price.
    """

    model_config = {"frozen": True}

    product_id: str = Field(min_length=1)
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(ge=0)
    variant: Variant | None = None
    name: str | None = None

    @field_validator("unit_price", mode="after")
    @classmethod
    def _quantize_price(cls, value: Decimal) -> Decimal:
        return to_money(value)

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


# ---------------------------------------------------------------------------
# Discounts
# ---------------------------------------------------------------------------


class DiscountKind(StrEnum):
    """How a discount rule reduces the subtotal."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountRule(BaseModel):
    """A validated promo reduction: percent of subtotal or a fixed amount."""

    model_config = {"frozen": True}

    code: str
    kind: DiscountKind
    amount: Decimal = Field(ge=0)

    @model_validator(mode="after")
    def _check_percentage(self) -> Self:
        if self.kind == DiscountKind.PERCENTAGE and self.amount > 100:
            msg = f"Percentage discount must be within 0-100, got {self.amount}"
            raise ValueError(msg)
        return self


class PriceBreakdown(BaseModel):
    """Derived price summary for a cart or a placed order."""

    model_config = {"frozen": True}

    subtotal: Decimal = ZERO
    discount: Decimal = ZERO
    shipping: Decimal = ZERO
    tax: Decimal = ZERO
    total: Decimal = ZERO

    @classmethod
    def zero(cls) -> PriceBreakdown:
        return cls()

    @property
    def is_reconciled(self) -> bool:
        """``total == subtotal - discount + shipping + tax`` and nothing negative."""
        parts = (self.subtotal, self.discount, self.shipping, self.tax, self.total)
        if any(p < 0 for p in parts):
            return False
        return self.total == self.subtotal - self.discount + self.shipping + self.tax


class CartSnapshot(BaseModel):
    """Cart contents and breakdown frozen together at checkout."""

    model_config = {"frozen": True}

    items: tuple[CartLineItem, ...] = ()
    breakdown: PriceBreakdown = Field(default_factory=PriceBreakdown)
    discount: DiscountRule | None = None


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


class PaymentMethod(StrEnum):
    """Payment options offered at checkout."""

    CARD = "card"
    UPI = "upi"
    COD = "cod"


def parse_payment_ref(ref: str) -> PaymentMethod | None:
    """Extract the PaymentMethod from ``"<method>"`` or ``"<method>:<token>"``."""
    method = ref.split(":", 1)[0].strip().lower()
    try:
        return PaymentMethod(method)
    except ValueError:
        return None


_PINCODE_RE = re.compile(r"^\d{6}$")
_PHONE_RE = re.compile(r"^\d{10}$")


class ShippingAddress(BaseModel):
    """Delivery address collected on the checkout screen."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    full_name: str = Field(min_length=1)
    address_line1: str = Field(min_length=1)
    address_line2: str | None = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    pincode: str
    phone: str

    @field_validator("pincode")
    @classmethod
    def _check_pincode(cls, value: str) -> str:
        if not _PINCODE_RE.match(value):
            msg = "pincode must be 6 digits"
            raise ValueError(msg)
        return value

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str) -> str:
        digits = value.replace(" ", "").removeprefix("+91")
        if not _PHONE_RE.match(digits):
            msg = "phone must be 10 digits"
            raise ValueError(msg)
        return digits


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class StatusChange(BaseModel):
    """One entry of an order's append-only status history."""

    model_config = {"frozen": True}

    status: OrderStatus
    at: datetime


class Order(BaseModel):
    """An order frozen from the cart at checkout.

    ``items`` and ``breakdown`` are snapshots and never change, even when
    catalog prices do.  Status changes go through the lifecycle service,
    which appends to ``status_history`` and updates ``status`` together.
    """

    id: str
    placed_at: datetime
    items: tuple[CartLineItem, ...]
    breakdown: PriceBreakdown
    shipping_address: ShippingAddress
    payment_method_ref: str
    promo_code: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    status_history: list[StatusChange] = Field(default_factory=list)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------


class StepState(StrEnum):
    """Render state of one tracking timeline step."""

    COMPLETED = "completed"
    CURRENT = "current"
    PENDING = "pending"


class TrackingStep(BaseModel):
    """A derived, display-ready step of the delivery timeline."""

    model_config = {"frozen": True}

    status: OrderStatus
    title: str
    description: str
    timestamp: datetime | None = None
    state: StepState
