"""Event dispatch via pluggy, on a ThreadPoolExecutor or inline.

Hooks run on a small worker pool so a slow plugin never delays a cart
mutation.  ``sync=True`` dispatches inline, which the CLI's ``--sync``
flag and the tests use.  Failed hook calls are kept in ``failures`` and
can be retried with :meth:`drain`.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from astrocart.services._helpers import now_iso

if TYPE_CHECKING:
    from astrocart.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


@dataclass
class FailedEvent:
    """A hook call that raised, kept for retry."""

    hook_name: str
    payload: dict[str, Any]
    error: str
    retries: int = 1
    failed_at: str = field(default_factory=now_iso)


class EventBus:
    """Async-by-default event dispatch via pluggy.

    Parameters:
        plugin_manager: PluginManager for hook dispatch.
        sync: Force synchronous dispatch (useful for testing / ``--sync``).
        max_retries: Attempts before a failed event is dropped by ``drain``.
        max_workers: ThreadPoolExecutor worker count.
    """

    def __init__(
        self,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_retries: int = 3,
        max_workers: int = 2,
    ) -> None:
        self._pm = plugin_manager
        self._sync = sync
        self._max_retries = max_retries
        self._executor: ThreadPoolExecutor | None = (
            None if sync else ThreadPoolExecutor(max_workers=max_workers)
        )
        self._futures: list[Future[None]] = []
        self._lock = threading.Lock()
        self.failures: list[FailedEvent] = []
        self.dead_letters: list[FailedEvent] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Dispatch *hook_name* with *payload*, async unless ``sync``."""
        if self._sync:
            self._execute_hook(hook_name, payload)
        else:
            assert self._executor is not None
            future = self._executor.submit(self._execute_hook, hook_name, payload)
            self._futures.append(future)

    def drain(self) -> list[dict[str, Any]]:
        """Wait for in-flight hooks, then retry failed events synchronously.

        Returns a summary list of ``{hook_name, status}`` per retried event.
        Events that reach ``max_retries`` move to ``dead_letters``.
        """
        self._wait_futures()

        with self._lock:
            pending = list(self.failures)
            self.failures.clear()

        results: list[dict[str, Any]] = []
        for event in pending:
            status = self._retry(event)
            results.append({"hook_name": event.hook_name, "status": status})
        return results

    def shutdown(self) -> None:
        """Shutdown ThreadPoolExecutor, waiting for pending tasks."""
        self._wait_futures()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _call(self, hook_name: str, payload: dict[str, Any]) -> None:
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            return
        hook_fn(**payload)

    def _execute_hook(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Attempt to dispatch a hook, recording a failure instead of raising."""
        try:
            self._call(hook_name, payload)
        except Exception as exc:
            logger.debug("Hook %s failed: %s", hook_name, exc)
            with self._lock:
                self.failures.append(FailedEvent(hook_name, payload, str(exc)))

    def _retry(self, event: FailedEvent) -> str:
        try:
            self._call(event.hook_name, event.payload)
        except Exception as exc:
            event.retries += 1
            event.error = str(exc)
            if event.retries >= self._max_retries:
                with self._lock:
                    self.dead_letters.append(event)
                return "dead_letter"
            with self._lock:
                self.failures.append(event)
            return "failed"
        return "completed"

    def _wait_futures(self) -> None:
        """Wait for all in-flight async futures to complete."""
        for future in self._futures:
            try:
                future.result(timeout=30)
            except Exception:
                logger.debug("Event future did not complete", exc_info=True)
        self._futures.clear()
