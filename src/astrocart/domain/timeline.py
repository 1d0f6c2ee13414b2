"""Delivery tracking timeline derived from an order's status history.

The timeline is never stored: it is rebuilt from ``status_history`` every
time it is shown, always in canonical order (pending, confirmed, shipped,
delivered), never reordered by timestamp.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from astrocart.domain.lifecycle import CANONICAL_SEQUENCE, OrderStatus
from astrocart.domain.models import Order, StepState, TrackingStep

STEP_COPY: dict[OrderStatus, tuple[str, str]] = {
    OrderStatus.PENDING: ("Order Placed", "Your order has been placed successfully"),
    OrderStatus.CONFIRMED: ("Order Confirmed", "Seller has processed your order"),
    OrderStatus.SHIPPED: ("Shipped", "Your order has been shipped"),
    OrderStatus.DELIVERED: ("Delivered", "Your order has been delivered"),
    OrderStatus.CANCELLED: ("Order Cancelled", "Your order has been cancelled"),
}


def _latest_timestamps(order: Order) -> dict[str, datetime]:
    """Map each status to the time it was last entered."""
    stamps: dict[str, datetime] = {}
    for change in order.status_history:
        stamps[str(change.status)] = change.at
    return stamps


def current_status(order: Order) -> OrderStatus:
    """Status of the newest history entry, falling back to ``order.status``."""
    if order.status_history:
        return order.status_history[-1].status
    return order.status


class TrackingTimelineBuilder:
    """Stateless builder for :class:`TrackingStep` lists."""

    def __init__(self, copy: Mapping[OrderStatus, tuple[str, str]] | None = None) -> None:
        self._copy = dict(STEP_COPY)
        if copy:
            self._copy.update(copy)

    def _step(
        self,
        status: OrderStatus,
        state: StepState,
        stamps: dict[str, datetime],
    ) -> TrackingStep:
        title, description = self._copy[status]
        timestamp = None if state == StepState.PENDING else stamps.get(str(status))
        return TrackingStep(
            status=status,
            title=title,
            description=description,
            timestamp=timestamp,
            state=state,
        )

    def build(self, order: Order) -> list[TrackingStep]:
        """Return the ordered timeline for *order*.

        Non-cancelled orders always yield four steps.  A cancelled order
        yields the steps it reached followed by a completed cancellation
        step.
        """
        stamps = _latest_timestamps(order)
        current = current_status(order)

        if current == OrderStatus.CANCELLED:
            reached = [
                s
                for s in CANONICAL_SEQUENCE
                if str(s) in stamps or s == OrderStatus.PENDING
            ]
            trail = [self._step(s, StepState.COMPLETED, stamps) for s in reached]
            trail.append(self._step(OrderStatus.CANCELLED, StepState.COMPLETED, stamps))
            return trail

        position = CANONICAL_SEQUENCE.index(current)
        steps: list[TrackingStep] = []
        for index, status in enumerate(CANONICAL_SEQUENCE):
            if index < position:
                state = StepState.COMPLETED
            elif index == position:
                state = StepState.COMPLETED if status == OrderStatus.DELIVERED else StepState.CURRENT
            else:
                state = StepState.PENDING
            steps.append(self._step(status, state, stamps))
        return steps
