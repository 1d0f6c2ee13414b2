"""structlog setup for the astrocart CLI.

Log lines go to stderr so stdout stays reserved for command output:
readable console lines by default, one JSON object per line with
``--log-json``.  Decimal amounts are logged as plain strings
(``"1280.00"``) in both modes.

Only the handler installed here is replaced on reconfiguration; other
handlers on the root logger are left alone.
"""

from __future__ import annotations

import logging
import sys
from decimal import Decimal
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor

HANDLER_NAME = "astrocart"

# Chatty libraries held at WARNING even under --verbose.
QUIET_LOGGERS = ("pluggy",)


def money_as_text(_logger: Any, _method: str, event_dict: EventDict) -> EventDict:
    """Log Decimal values as ``"1280.00"`` instead of ``Decimal('1280.00')``."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        money_as_text,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool, stream: TextIO) -> Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib ``astrocart.*`` loggers to *stream*.

    Args:
        verbose: ``astrocart`` loggers emit DEBUG; otherwise WARNING and up.
        log_json: JSON lines instead of console output.
        stream: Destination, ``sys.stderr`` by default.
    """
    stream = stream or sys.stderr
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json, stream),
            ],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("astrocart").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
