"""Structlog configuration for the service.

Every event carries the service name so that lines from this service can be
told apart from the Auction and Item services' lines in a shared sink.
"""

import logging
import os
import sys
from typing import Literal

import structlog

LogFormat = Literal["auto", "console", "json"]

SERVICE_NAME = "limcoin-users"


def _add_service_name(
    logger: object, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _use_console(log_format: LogFormat) -> bool:
    if log_format != "auto":
        return log_format == "console"
    # FORCE_COLOR=1 keeps the console renderer in non-TTY containers
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    return force_color or sys.stdout.isatty()


def configure_logging(debug: bool = False, log_format: LogFormat = "auto") -> None:
    """Configure structlog.

    Args:
        debug: Also emit debug events (repository reads, remote calls started).
        log_format: "console" for colored output, "json" for one JSON object
            per line, "auto" to pick console on a TTY and JSON elsewhere.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_service_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if _use_console(log_format):
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
