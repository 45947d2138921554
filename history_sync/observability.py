"""
Structured logging setup.

Every module gets its logger via ``structlog.get_logger(__name__)`` and binds
its own context (``component=...``); this module owns the processor chain.
"""

import logging
import sys

import structlog

from history_sync.config import LoggingConfig


def _processors(renderer: structlog.types.Processor) -> list[structlog.types.Processor]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog on top of stdlib logging (JSON in production, console in development)."""
    config = config or LoggingConfig()

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=config.level, force=True)

    renderer: structlog.types.Processor
    if config.format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=_processors(renderer),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
