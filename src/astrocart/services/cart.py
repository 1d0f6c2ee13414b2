"""CartStore — the single owner of cart lines and the applied promo.

Every mutation runs under one re-entrant lock and recomputes the
breakdown before releasing it, so rapid +/- taps are applied one at a
time against the latest state and no caller ever observes items and
breakdown out of step.

Pipeline per mutation: VALIDATE → APPLY → PRICE → PUBLISH → RESPOND
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from astrocart.domain.models import CartLineItem, CartSnapshot, DiscountRule, PriceBreakdown, Variant
from astrocart.domain.money import to_money
from astrocart.domain.promo import normalize_code
from astrocart.services.base import BaseService
from astrocart.services.contracts import CartResultData, cart_line_payload, dump_validated
from astrocart.services.result import ErrorCode, ServiceResult
from astrocart.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from astrocart.infrastructure.shop import Shop

logger = logging.getLogger(__name__)

BreakdownListener = Callable[[PriceBreakdown], None]


class CartStore(BaseService):
    """In-memory cart for one session.

    Read accessors (``items``, ``discount``, ``breakdown``) always return
    a consistent view; mutations return a :class:`ServiceResult` whose
    data carries the whole new cart.
    """

    def __init__(self, shop: Shop) -> None:
        super().__init__(shop)
        self._lock = threading.RLock()
        self._lines: dict[str, CartLineItem] = {}
        self._discount: DiscountRule | None = None
        self._breakdown = PriceBreakdown.zero()
        self._listeners: list[BreakdownListener] = []

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        with self._lock:
            return tuple(self._lines.values())

    @property
    def discount(self) -> DiscountRule | None:
        with self._lock:
            return self._discount

    @property
    def breakdown(self) -> PriceBreakdown:
        with self._lock:
            return self._breakdown

    @property
    def item_count(self) -> int:
        """Total units across all lines."""
        with self._lock:
            return sum(line.quantity for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._lines

    def badge_label(self) -> str:
        """Cart badge text: ``""`` when empty, ``"99+"`` above the cap."""
        count = self.item_count
        cap = self._shop.settings.cart.badge_cap
        if count == 0:
            return ""
        if count > cap:
            return f"{cap}+"
        return str(count)

    def snapshot(self) -> CartSnapshot:
        """Items, breakdown and discount as one consistent frozen value."""
        with self._lock:
            return CartSnapshot(
                items=tuple(self._lines.values()),
                breakdown=self._breakdown,
                discount=self._discount,
            )

    @contextmanager
    def checkout_hold(self) -> Iterator[CartSnapshot]:
        """Hold the cart lock for a checkout and yield its snapshot.

        Mutations from other threads wait until the block exits, so the
        snapshot and the caller's ``clear()`` see the same lines.
        """
        with self._lock:
            yield self.snapshot()

    def subscribe(self, listener: BreakdownListener) -> Callable[[], None]:
        """Call *listener* with every newly published breakdown.

        Returns a function that removes the listener again.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @traced
    def add_or_increment(
        self,
        product_id: str,
        unit_price: Decimal | int | float | str,
        delta: int = 1,
        *,
        variant: Variant | None = None,
        name: str | None = None,
    ) -> ServiceResult:
        """Add a new line or change an existing line's quantity by *delta*.

        A negative *delta* that would take the quantity below zero clamps
        to zero, which removes the line.
        """
        op = "add_or_increment"
        warnings: list[str] = []

        product_id = product_id.strip()
        if not product_id:
            return ServiceResult.failure(op, ErrorCode.VALIDATION_ERROR, "product_id is required")
        try:
            price = to_money(unit_price)
        except (InvalidOperation, ValueError, TypeError):
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                f"Invalid unit price: {unit_price!r}",
                product_id=product_id,
            )
        if price < 0:
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                f"Unit price must not be negative, got {price}",
                product_id=product_id,
            )

        with self._lock:
            existing = self._lines.get(product_id)
            if existing is None:
                if delta <= 0:
                    return ServiceResult.failure(
                        op,
                        ErrorCode.VALIDATION_ERROR,
                        f"Cannot add {product_id} with quantity change {delta}",
                        product_id=product_id,
                        delta=delta,
                    )
                self._lines[product_id] = CartLineItem(
                    product_id=product_id,
                    unit_price=price,
                    quantity=delta,
                    variant=variant,
                    name=name,
                )
            else:
                if price != existing.unit_price:
                    warnings.append(
                        f"Price for {product_id} stays at {existing.unit_price}; "
                        "re-add the product to pick up a new price"
                    )
                quantity = existing.quantity + delta
                if quantity < 0:
                    warnings.append(
                        f"Quantity for {product_id} cannot go below zero; line removed"
                    )
                    quantity = 0
                self._put(existing, quantity)

            return self._publish(op, warnings)

    @traced
    def set_quantity(self, product_id: str, quantity: int) -> ServiceResult:
        """Set a line's quantity outright; zero removes the line."""
        op = "set_quantity"
        product_id = product_id.strip()
        if quantity < 0:
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                f"Quantity must not be negative, got {quantity}",
                product_id=product_id,
            )

        with self._lock:
            existing = self._lines.get(product_id)
            if existing is None:
                return ServiceResult.failure(
                    op,
                    ErrorCode.ITEM_NOT_FOUND,
                    f"No cart line for product: {product_id}",
                    product_id=product_id,
                )
            self._put(existing, quantity)
            return self._publish(op, [])

    def remove(self, product_id: str) -> ServiceResult:
        """Remove a line entirely."""
        result = self.set_quantity(product_id, 0)
        return result.model_copy(update={"op": "remove"})

    @traced
    def apply_promo(self, code: str) -> ServiceResult:
        """Validate *code* and, on success, apply its discount.

        On any failure the cart is left exactly as it was.
        """
        op = "apply_promo"
        with self._lock:
            if not self._lines:
                return ServiceResult.failure(
                    op,
                    ErrorCode.EMPTY_CART,
                    "Add items to the cart before applying a promo code",
                    code=normalize_code(code),
                )

            applied = self._discount.code if self._discount else None
            validation = self._shop.promos.validate(
                code,
                self._breakdown.subtotal,
                applied_code=applied,
            )
            if validation.error is not None:
                return ServiceResult.failure(
                    op, ErrorCode.VALIDATION_ERROR, validation.error, code=validation.code
                )
            if validation.rule is None:
                reason = str(validation.reason)
                logger.debug("Promo %s rejected: %s", validation.code, reason)
                return ServiceResult.failure(
                    op,
                    ErrorCode.PROMO_REJECTED,
                    f"Promo code {validation.code} rejected: {reason}",
                    code=validation.code,
                    reason=reason,
                )

            warnings: list[str] = []
            if applied is not None:
                warnings.append(f"Promo code {applied} replaced by {validation.code}")
            self._discount = validation.rule
            return self._publish(op, warnings)

    @traced
    def clear_promo(self) -> ServiceResult:
        """Drop the applied discount, if any."""
        with self._lock:
            self._discount = None
            return self._publish("clear_promo", [])

    @traced
    def clear(self) -> ServiceResult:
        """Empty the cart (and with it the discount)."""
        with self._lock:
            self._lines.clear()
            return self._publish("clear", [])

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _put(self, existing: CartLineItem, quantity: int) -> None:
        """Store *existing* with a new quantity; zero drops the line."""
        if quantity == 0:
            del self._lines[existing.product_id]
        else:
            self._lines[existing.product_id] = existing.model_copy(update={"quantity": quantity})

    def _reprice(self) -> None:
        """Recompute the breakdown; an empty cart forgets its discount."""
        if not self._lines:
            self._discount = None
        with trace_span("pricing.compute", lines=len(self._lines)) as span:
            self._breakdown = self._shop.pricing.compute(self._lines.values(), self._discount)
            if span is not None:
                span.tag(
                    subtotal=str(self._breakdown.subtotal),
                    discount=str(self._breakdown.discount),
                    shipping=str(self._breakdown.shipping),
                    total=str(self._breakdown.total),
                )

    def _payload(self) -> dict[str, Any]:
        return dump_validated(
            CartResultData,
            {
                "items": [cart_line_payload(line) for line in self._lines.values()],
                "breakdown": self._breakdown,
                "promo_code": self._discount.code if self._discount else None,
                "item_count": sum(line.quantity for line in self._lines.values()),
            },
        )

    def _publish(self, op: str, warnings: list[str]) -> ServiceResult:
        """Reprice, notify listeners and plugins, and build the result.

        Caller must hold the lock.
        """
        self._reprice()
        breakdown = self._breakdown
        for listener in list(self._listeners):
            try:
                listener(breakdown)
            except Exception:
                logger.debug("Cart listener failed", exc_info=True)
                name = getattr(listener, "__name__", repr(listener))
                warnings.append(f"Cart listener {name} failed")

        data = self._payload()
        self._dispatch_event(
            "post_cart_change",
            {
                "op": op,
                "item_count": data["item_count"],
                "promo_code": data["promo_code"],
                "breakdown": data["breakdown"],
            },
            warnings,
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
