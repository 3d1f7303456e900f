"""Structured logging configuration using structlog."""

import logging
from typing import Any, Dict, Optional

import structlog
from rich.logging import RichHandler

from careerboard.config import Settings, settings as default_settings


def configure_logging(config: Optional[Settings] = None) -> None:
    """Configure structured logging with rich output."""
    config = config or default_settings
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[RichHandler(rich_tracebacks=True, markup=True)],
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.dev.ConsoleRenderer() if config.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_operation(operation: str, **kwargs: Any) -> Dict[str, Any]:
    """Create a log context for a lifecycle or catalog operation."""
    return {
        "operation": operation,
        "parameters": {k: v for k, v in kwargs.items() if not k.startswith("_") and v is not None},
    }
