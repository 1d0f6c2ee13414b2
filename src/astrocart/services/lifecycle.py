"""OrderLifecycle — guarded status transitions for placed orders.

A transition either fully happens (history entry appended, status
updated, event dispatched) or not at all.  Re-requesting the current
status is rejected with ALREADY_IN_STATE so callers can tell "nothing
happened" from "advanced"; any move the transition map does not allow is
INVALID_TRANSITION.  When two sources race, the first one to land wins
and the second sees one of those two rejections.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from astrocart.domain.lifecycle import (
    OrderStatus,
    allowed_targets,
    is_valid_transition,
    parse_status,
)
from astrocart.domain.models import Order, StatusChange
from astrocart.services.base import BaseService
from astrocart.services.contracts import TransitionResultData, dump_validated
from astrocart.services.result import ErrorCode, ServiceResult
from astrocart.services.telemetry import traced

if TYPE_CHECKING:
    from astrocart.domain.models import TrackingStep

logger = logging.getLogger(__name__)


class OrderLifecycle(BaseService):
    """Applies status transitions to an :class:`Order` in place."""

    @traced
    def transition(self, order: Order, new_status: OrderStatus | str) -> ServiceResult:
        """Move *order* to *new_status* if the transition map allows it."""
        op = "transition"
        target = parse_status(str(new_status))
        if target is None:
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION_ERROR,
                f"Unknown order status: {new_status!r}",
                order_id=order.id,
                allowed=[str(s) for s in OrderStatus],
            )

        current = order.status
        if target == current:
            return ServiceResult.failure(
                op,
                ErrorCode.ALREADY_IN_STATE,
                f"Order {order.id} is already {current}",
                order_id=order.id,
                status=str(current),
            )

        if not is_valid_transition(current, target):
            allowed = allowed_targets(current)
            return ServiceResult.failure(
                op,
                ErrorCode.INVALID_TRANSITION,
                f"Invalid status transition: {current} -> {target}. Allowed: {allowed}",
                order_id=order.id,
                from_status=str(current),
                to_status=str(target),
                allowed=allowed,
            )

        at = self._shop.now()
        order.status_history = [*order.status_history, StatusChange(status=target, at=at)]
        order.status = target
        logger.debug("Order %s: %s -> %s", order.id, current, target)

        step = self._timeline_step(order, target)
        warnings: list[str] = []
        self._dispatch_event(
            "post_order_transition",
            {
                "order_id": order.id,
                "from_status": str(current),
                "to_status": str(target),
                "at": at.isoformat(),
                "step": step.model_dump(mode="json"),
            },
            warnings,
        )

        data = dump_validated(
            TransitionResultData,
            {
                "order_id": order.id,
                "from_status": str(current),
                "to_status": str(target),
                "at": at.isoformat(),
                "step": step,
                "order": order,
            },
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def cancel(self, order: Order) -> ServiceResult:
        """Cancel *order*; only pending or confirmed orders qualify."""
        result = self.transition(order, OrderStatus.CANCELLED)
        return result.model_copy(update={"op": "cancel"})

    def _timeline_step(self, order: Order, status: OrderStatus) -> TrackingStep:
        """The timeline step for *status* as rendered right after the move."""
        for step in self._shop.timeline.build(order):
            if step.status == status:
                return step
        msg = f"Timeline for {order.id} has no {status} step"
        raise LookupError(msg)
