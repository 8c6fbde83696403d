"""Structured logging setup shared by the CLI and the simulator."""

import logging

import structlog

from .settings import WatchSettings


def config_configure_logging(settings: WatchSettings) -> None:
    """Configure structlog processors and level filtering.

    Args:
        settings: Validated settings providing level and renderer choice.

    Returns:
        None: Configures structlog globally as side effect.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(settings.log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
