"""
hotconf Logging Configuration

Structured logging setup using structlog with JSON output for production
and human-readable output for development.
"""

import logging
import sys
from typing import IO, Any

import structlog


def setup_logging(
    log_level: str = "INFO",
    environment: str = "development",
    enable_json: bool = False,
    stream: IO[str] | None = None,
) -> None:
    """
    Setup structured logging for the loader and its host process.

    Replaces any root handlers so repeated calls (e.g. after a log level
    change in reloaded configuration) take effect. Output goes to stdout
    unless another stream is given.
    """

    logging.basicConfig(
        format="%(message)s",
        stream=stream if stream is not None else sys.stdout,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production" or enable_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)


def _drop_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    raise structlog.DropEvent


def null_logger() -> structlog.BoundLogger:
    """Logger that discards every event, used when the caller supplies none."""
    return structlog.wrap_logger(
        structlog.ReturnLogger(),
        processors=[_drop_event],
    )
