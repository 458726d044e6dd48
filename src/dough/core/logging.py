# src/dough/core/logging.py
"""Structured logging for Dough.

Config events are logged with structlog (``structlog.get_logger(__name__)``
in every module) and carry their context as keywords:

    logger.error("config.file_parse_failed", file="EngineVideo.cfg", error=...)

configure_logging() installs one stdlib handler whose ProcessorFormatter
renders both structlog events and plain ``logging`` records, so a host
program's own log lines come out in the same JSON or console format.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

__all__ = ["configure_logging", "get_logger"]

# Dynaconf logs every settings lookup at DEBUG
_NOISY_LOGGERS: tuple[str, ...] = ("dynaconf",)


def _drop_formatter_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Strip the bookkeeping keys ProcessorFormatter adds to every record."""
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _level_number(level: str) -> int:
    number = logging.getLevelNamesMapping().get(level.upper())
    if number is None:
        raise ValueError(f"Unknown log level: {level!r}")
    return number


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one handler.

    Safe to call again: Engine.init configures logging once with defaults
    and again once EngineCore's values are bound.

    Args:
        json_output: One JSON object per line instead of console output.
        level: Root level name (DEBUG, INFO, WARNING, ERROR, CRITICAL),
            case-insensitive.
        stream: Destination, stdout by default.

    Raises:
        ValueError: If ``level`` is not a known level name.
    """
    log_level = _level_number(level)

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]
    renderer: Any = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    )
    render_chain: list[Any] = [_drop_formatter_fields, structlog.processors.format_exc_info, renderer]
    if not json_output:
        # ConsoleRenderer formats exceptions itself
        render_chain.remove(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(ProcessorFormatter(processors=render_chain, foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Bound structlog logger for ``name`` (usually ``__name__``)."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
