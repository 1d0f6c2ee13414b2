"""Operation tracing for shop services.

With ``--verbose`` each ``@traced`` service call records an
:class:`OpTrace`: its wall time, the steps it ran (repricing, order
load/save, plugin dispatch, nested service calls) and shop attributes
read off the result, such as item count, applied promo, total, order id
and status.  The finished trace lands in ``ServiceResult.meta["telemetry"]``
and is logged at DEBUG.

With tracing off, a call costs one ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog

from astrocart.services.result import ServiceResult

log = structlog.get_logger("astrocart.telemetry")

_tracing: ContextVar[bool] = ContextVar("astrocart_tracing", default=False)
_active_trace: ContextVar[OpTrace | None] = ContextVar("astrocart_active_trace", default=None)


@dataclass
class OpTrace:
    """Timing and attributes for one service call or one step inside it."""

    name: str
    attrs: dict[str, Any] = field(default_factory=dict)
    steps: list[OpTrace] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    @property
    def elapsed_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def finish(self) -> None:
        self.finished = time.perf_counter()

    def tag(self, **attrs: Any) -> None:
        self.attrs.update(attrs)

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.elapsed_ms, 2)}
        if self.attrs:
            out["attrs"] = dict(self.attrs)
        if self.steps:
            out["children"] = [step.as_dict() for step in self.steps]
        return out


def result_attrs(result: ServiceResult) -> dict[str, Any]:
    """Shop attributes worth keeping from a service result."""
    attrs: dict[str, Any] = {"op": result.op, "ok": result.ok}
    if result.error is not None:
        attrs["error"] = result.error.code
        return attrs

    data = result.data
    order = data.get("order")
    if isinstance(order, dict):
        attrs["order_id"] = order.get("id")
        attrs["status"] = order.get("status")
        data = {**data, "breakdown": order.get("breakdown")}
    elif "order_id" in data:
        attrs["order_id"] = data["order_id"]
    if "to_status" in data:
        attrs["status"] = data["to_status"]
    if "item_count" in data:
        attrs["items"] = data["item_count"]
    if data.get("promo_code"):
        attrs["promo"] = data["promo_code"]
    breakdown = data.get("breakdown")
    if isinstance(breakdown, dict):
        attrs["total"] = breakdown.get("total")
    if "count" in data:
        attrs["count"] = data["count"]
    if result.warnings:
        attrs["warnings"] = len(result.warnings)
    return attrs


@contextmanager
def trace_span(name: str, **attrs: Any) -> Iterator[OpTrace | None]:
    """Record a step of the traced call in progress.

    Yields None when tracing is off or no ``@traced`` call is running.
    """
    parent = _active_trace.get() if _tracing.get() else None
    if parent is None:
        yield None
        return

    step = OpTrace(name=name, attrs=dict(attrs))
    parent.steps.append(step)
    token = _active_trace.set(step)
    try:
        yield step
    finally:
        step.finish()
        _active_trace.reset(token)


def _log_trace(trace: OpTrace) -> None:
    log.debug(
        "op.traced",
        span=trace.name,
        duration_ms=round(trace.elapsed_ms, 2),
        steps=len(trace.steps),
        **trace.attrs,
    )


def traced[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Trace a service method and attach the trace to its ServiceResult.

    A traced call made inside another one is also recorded as a step of
    the outer trace, so checkout shows the cart clear it triggered.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        if not _tracing.get():
            return func(*args, **kwargs)

        trace = OpTrace(name=func.__qualname__)
        parent = _active_trace.get()
        if parent is not None:
            parent.steps.append(trace)
        token = _active_trace.set(trace)
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            trace.finish()
            trace.tag(ok=False, raised=type(exc).__name__)
            _log_trace(trace)
            raise
        finally:
            _active_trace.reset(token)

        trace.finish()
        if not isinstance(result, ServiceResult):
            _log_trace(trace)
            return result

        trace.tag(**result_attrs(result))
        _log_trace(trace)
        meta = {**(result.meta or {}), "telemetry": trace.as_dict()}
        return result.model_copy(update={"meta": meta})  # type: ignore[return-value]

    return wrapper


def enable_telemetry() -> None:
    """Turn tracing on for this context (``--verbose``)."""
    _tracing.set(True)


def disable_telemetry() -> None:
    _tracing.set(False)
    _active_trace.set(None)


def current_trace() -> OpTrace | None:
    """The trace or step being recorded right now, if tracing is on."""
    if not _tracing.get():
        return None
    return _active_trace.get()
