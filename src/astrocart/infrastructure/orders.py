"""OrderRepository: one JSON file per order.

Stands in for the app's ``placeOrder`` / ``fetchOrderStatus`` backend so
the CLI and tests can persist orders between invocations.  Files are
written atomically (temp file + rename) so a crash never leaves a
half-written order behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from astrocart.domain.ids import validate_order_id
from astrocart.domain.models import Order

logger = logging.getLogger(__name__)


class OrderReadError(Exception):
    """An order file exists but does not hold a valid order."""

    def __init__(self, order_id: str, path: Path) -> None:
        super().__init__(f"Order file for {order_id} is unreadable: {path}")
        self.order_id = order_id
        self.path = path


class OrderRepository:
    """Load and save :class:`Order` records under *root*."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def path_for(self, order_id: str) -> Path:
        return self.root / f"{order_id}.json"

    def save(self, order: Order) -> Path:
        """Write *order* to disk, replacing any previous version."""
        self.root.mkdir(parents=True, exist_ok=True)
        target = self.path_for(order.id)
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(order.model_dump_json(indent=2))
            os.replace(tmp_name, target)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved order %s (%s)", order.id, order.status)
        return target

    def get(self, order_id: str) -> Order | None:
        """Load an order by id, or None when it does not exist.

        Raises:
            OrderReadError: the file exists but cannot be read or parsed.
        """
        if not validate_order_id(order_id):
            return None
        path = self.path_for(order_id)
        if not path.is_file():
            return None
        try:
            return Order.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning("Unreadable order file: %s", path)
            raise OrderReadError(order_id, path) from exc

    def list(self) -> list[Order]:
        """All readable orders, newest first.

        Unreadable files are skipped with a warning.
        """
        if not self.root.is_dir():
            return []
        orders: list[Order] = []
        for path in sorted(self.root.glob("ORD-*.json")):
            try:
                orders.append(Order.model_validate_json(path.read_text(encoding="utf-8")))
            except (OSError, ValidationError):
                logger.warning("Skipping unreadable order file: %s", path)
        orders.sort(key=lambda o: o.placed_at, reverse=True)
        return orders
