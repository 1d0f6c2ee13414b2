"""OrderService — checkout, lookup, history and tracking for placed orders.

Checkout pipeline: VALIDATE → FREEZE → PERSIST → CLEAR CART → EVENT → RESPOND
(the cart snapshot and its breakdown are copied into the Order and never
recomputed afterwards).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from astrocart.domain.ids import generate_order_id
from astrocart.domain.lifecycle import OrderStatus, is_cancellable, parse_status
from astrocart.domain.models import Order, ShippingAddress, StatusChange, parse_payment_ref
from astrocart.infrastructure.orders import OrderReadError
from astrocart.services._helpers import describe_validation_error, validation_fields
from astrocart.services.base import BaseService
from astrocart.services.contracts import (
    OrderListResultData,
    OrderResultData,
    TimelineResultData,
    dump_validated,
    order_summary_payload,
)
from astrocart.services.lifecycle import OrderLifecycle
from astrocart.services.result import ErrorCode, ServiceResult
from astrocart.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from astrocart.services.cart import CartStore

logger = logging.getLogger(__name__)


class OrderService(BaseService):
    """Creates orders from the cart and manages them by id."""

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    @traced
    def place_order(
        self,
        cart: CartStore,
        address: ShippingAddress | dict[str, Any],
        payment_method_ref: str,
    ) -> ServiceResult:
        """Freeze *cart* into a new pending order and clear the cart."""
        op = "place_order"

        if not isinstance(address, ShippingAddress):
            try:
                address = ShippingAddress.model_validate(address)
            except ValidationError as exc:
                return ServiceResult.failure(
                    op,
                    ErrorCode.VALIDATION_ERROR,
                    f"Invalid shipping address: {describe_validation_error(exc)}",
                    fields=validation_fields(exc),
                )

        method = parse_payment_ref(payment_method_ref)
        if method is None:
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                f"Unknown payment method: {payment_method_ref!r}",
                payment_method_ref=payment_method_ref,
            )

        warnings: list[str] = []
        # Snapshot and clear under one hold of the cart lock.
        with cart.checkout_hold() as snapshot:
            if not snapshot.items:
                return ServiceResult.failure(op, ErrorCode.EMPTY_CART, "Cart is empty")

            placed_at = self._shop.now()
            order = Order(
                id=generate_order_id(),
                placed_at=placed_at,
                items=snapshot.items,
                breakdown=snapshot.breakdown,
                shipping_address=address,
                payment_method_ref=payment_method_ref,
                promo_code=snapshot.discount.code if snapshot.discount else None,
                status=OrderStatus.PENDING,
                status_history=[StatusChange(status=OrderStatus.PENDING, at=placed_at)],
            )
            self._save(order)
            logger.debug("Placed order %s total=%s", order.id, order.breakdown.total)
            warnings.extend(cart.clear().warnings)

        self._dispatch_event(
            "post_order_placed",
            {
                "order_id": order.id,
                "item_count": order.item_count,
                "total": str(order.breakdown.total),
                "payment_method": str(method),
            },
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data=self._order_payload(order),
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @traced
    def get_order(self, order_id: str) -> ServiceResult:
        """Return one order by id."""
        op = "get_order"
        order = self._load(op, order_id)
        if isinstance(order, ServiceResult):
            return order
        return ServiceResult(ok=True, op=op, data=self._order_payload(order))

    @traced
    def list_orders(self, status: OrderStatus | str | None = None) -> ServiceResult:
        """Order history, newest first, optionally filtered by *status*."""
        op = "list_orders"
        wanted: OrderStatus | None = None
        if status is not None and str(status) != "all":
            wanted = parse_status(str(status))
            if wanted is None:
                return ServiceResult.failure(
                    op,
                    ErrorCode.VALIDATION_ERROR,
                    f"Unknown order status: {status!r}",
                    allowed=["all", *(str(s) for s in OrderStatus)],
                )

        orders = [o for o in self._shop.orders.list() if wanted is None or o.status == wanted]
        data = dump_validated(
            OrderListResultData,
            {
                "count": len(orders),
                "status_filter": str(wanted) if wanted else None,
                "items": [order_summary_payload(o) for o in orders],
            },
        )
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Lifecycle by id
    # ------------------------------------------------------------------

    @traced
    def advance(self, order_id: str, status: OrderStatus | str) -> ServiceResult:
        """Load, transition and save an order."""
        order = self._load("transition", order_id)
        if isinstance(order, ServiceResult):
            return order
        result = OrderLifecycle(self._shop).transition(order, status)
        if result.ok:
            self._save(order)
        return result

    @traced
    def cancel(self, order_id: str) -> ServiceResult:
        """Load, cancel and save an order."""
        order = self._load("cancel", order_id)
        if isinstance(order, ServiceResult):
            return order
        result = OrderLifecycle(self._shop).cancel(order)
        if result.ok:
            self._save(order)
        return result

    @traced
    def track(self, order_id: str) -> ServiceResult:
        """Tracking timeline for an order."""
        op = "track"
        order = self._load(op, order_id)
        if isinstance(order, ServiceResult):
            return order
        data = dump_validated(
            TimelineResultData,
            {
                "order_id": order.id,
                "status": str(order.status),
                "steps": self._shop.timeline.build(order),
            },
        )
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _order_payload(order: Order) -> dict[str, Any]:
        return dump_validated(
            OrderResultData,
            {"order": order, "cancellable": is_cancellable(order.status)},
        )

    @staticmethod
    def _not_found(op: str, order_id: str) -> ServiceResult:
        return ServiceResult.failure(
            op,
            ErrorCode.NOT_FOUND,
            f"No order found with ID: {order_id}",
            order_id=order_id,
        )

    def _load(self, op: str, order_id: str) -> Order | ServiceResult:
        """Fetch an order, or the failure result to hand back instead."""
        with trace_span("orders.load", order_id=order_id):
            try:
                order = self._shop.orders.get(order_id)
            except OrderReadError as exc:
                return ServiceResult.failure(
                    op,
                    ErrorCode.UNREADABLE_ORDER,
                    str(exc),
                    order_id=order_id,
                    path=str(exc.path),
                )
        if order is None:
            return self._not_found(op, order_id)
        return order

    def _save(self, order: Order) -> None:
        with trace_span("orders.save", order_id=order.id, status=str(order.status)):
            self._shop.orders.save(order)
