"""
Argot structured logging.

Purpose
- Give every engine module a structlog logger bound to a stdlib logger under
  the "argot" namespace, so output follows the host's logging configuration.

Behavior
- The library is silent by default: the "argot" logger carries a NullHandler
  and nothing is configured globally (structlog.configure is never called).
- configure_logging() is an opt-in helper for scripts and tests: it installs a
  single stream handler rendering events with structlog's ProcessorFormatter
  (console renderer, or JSON lines).

Usage
    >>> from argot.logs import configure_logging, get_logger
    >>> configure_logging("DEBUG")
    >>> get_logger(__name__).info("parse_started", source="add 1 2")
"""
import logging

import structlog

_processors = (
    # Drop events below the stdlib logger's effective level before rendering.
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
)

_handler = None

logging.getLogger("argot").addHandler(logging.NullHandler())


def get_logger(name, /):
    """
    Return a structlog bound logger wrapping the stdlib logger `name`.
    """
    if not isinstance(name, str):
        raise TypeError("get_logger() argument must be a string")
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=list(_processors),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging(level="INFO", *, json=False):
    """
    Route the "argot" loggers to stderr through a structlog ProcessorFormatter.

    Calling it again replaces the previously installed handler, so the level
    or renderer can be switched at any time (tests use "CRITICAL" to mute).
    """
    global _handler

    if not isinstance(level, str | int):
        raise TypeError("configure_logging() level must be a string or an integer")

    logger = logging.getLogger("argot")
    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler()
    _handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(),
        ],
    ))
    logger.addHandler(_handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    # Events are rendered here; the root logger must not print them twice.
    logger.propagate = False
    return get_logger("argot")


__all__ = (
    "get_logger",
    "configure_logging",
)
