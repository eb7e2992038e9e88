"""
Logging Configuration for the Droguerie Jamal data tooling

structlog events and stdlib records from SQLAlchemy, Prefect and the drivers
share one stdout handler, rendered for a terminal or as JSON lines.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.stdlib import ProcessorFormatter

from droguerie.config.settings import Settings, get_settings

# Driver loggers kept at WARNING unless a quieter level is requested
QUIET_LOGGERS = ("aiosqlite", "httpx", "httpcore")

SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
]


def build_renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: Optional[str] = None, settings: Optional[Settings] = None) -> None:
    """
    Route structlog and stdlib logging to stdout.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        settings: Settings to read the level and format from
    """
    settings = settings or get_settings()
    level = (log_level or settings.logging.log_level).upper()
    numeric_level = getattr(logging, level, logging.INFO)

    structlog.configure(
        processors=SHARED_PROCESSORS + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processors=[
                ProcessorFormatter.remove_processors_meta,
                build_renderer(settings.logging.log_format),
            ],
            foreign_pre_chain=SHARED_PROCESSORS,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=level,
        format=settings.logging.log_format,
    )
