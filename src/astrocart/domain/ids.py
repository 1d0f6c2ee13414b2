"""Order ID patterns, validation, and generation.

Order IDs are ``ORD-`` followed by ten upper-case hex characters drawn
from a random UUID.

INVARIANT: IDs are permanent. Once generated, an order ID never changes.
"""

from __future__ import annotations

import re
import uuid

ORDER_ID_PREFIX = "ORD-"
ORDER_ID_PATTERN: re.Pattern[str] = re.compile(r"^ORD-[0-9A-F]{10}$")


def generate_order_id() -> str:
    """Generate a fresh order ID."""
    return f"{ORDER_ID_PREFIX}{uuid.uuid4().hex[:10].upper()}"


def validate_order_id(order_id: str) -> bool:
    """Check whether *order_id* matches the order ID pattern."""
    return ORDER_ID_PATTERN.match(order_id) is not None
