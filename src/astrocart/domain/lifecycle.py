"""Order status lifecycle: the closed status enum and its transition map.

Forward path: pending -> confirmed -> shipped -> delivered.
Cancellation is reachable from pending or confirmed only; shipped and
delivered orders leave through the return/refund flow, which lives
outside this package.
"""

from __future__ import annotations

from enum import StrEnum


class OrderStatus(StrEnum):
    """Status of a placed order."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        """Display label, e.g. ``Shipped``."""
        return self.value.capitalize()

    @property
    def is_terminal(self) -> bool:
        return self.value in TERMINAL_STATUSES


# --- Transition map ---

ORDER_TRANSITIONS: dict[str, list[str]] = {
    "pending": ["confirmed", "cancelled"],
    "confirmed": ["shipped", "cancelled"],
    "shipped": ["delivered"],
    "delivered": [],
    "cancelled": [],
}

TERMINAL_STATUSES: frozenset[str] = frozenset({"delivered", "cancelled"})

# Statuses a tracking timeline walks through; cancellation short-circuits it.
CANONICAL_SEQUENCE: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = ORDER_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(str(current), [])
    return target in allowed


def allowed_targets(current: str) -> list[str]:
    """Statuses reachable in one step from *current*."""
    return list(ORDER_TRANSITIONS.get(str(current), []))


def is_cancellable(status: str) -> bool:
    """Whether an order in *status* may still be cancelled."""
    return is_valid_transition(status, OrderStatus.CANCELLED)


def parse_status(value: str) -> OrderStatus | None:
    """Return the OrderStatus for *value* (case-insensitive), or None."""
    try:
        return OrderStatus(value.strip().lower())
    except ValueError:
        return None
