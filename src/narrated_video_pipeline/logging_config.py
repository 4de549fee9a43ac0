"""
Structured logging configuration for the narrated video pipeline.
"""

import sys
import logging
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory

from .config import Settings, get_settings


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure structured logging for the application."""
    settings = settings or get_settings()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    if settings.logs_dir is None:
        return

    # File handlers for persistent logging
    settings.logs_dir.mkdir(parents=True, exist_ok=True)
    root_logger = logging.getLogger()
    known = {getattr(h, "baseFilename", None) for h in root_logger.handlers}

    for filename, level in (("pipeline.log", logging.INFO), ("errors.log", logging.ERROR)):
        path = settings.logs_dir / filename
        if str(path.resolve()) in known:
            continue
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(level)
        root_logger.addHandler(handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class LoggerMixin:
    """Mixin class to add logging capabilities to other classes."""

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        """Get a logger instance for this class."""
        return get_logger(self.__class__.__name__)


# Setup logging on import
setup_logging()
