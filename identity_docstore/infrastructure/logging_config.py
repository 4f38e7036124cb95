"""structlog configuration."""

import logging
from typing import Optional

import structlog

from identity_docstore.infrastructure.config import get_log_level


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structlog console output.

    Args:
        level: Log level name (defaults to LOG_LEVEL env var)
    """
    level_name = (level or get_log_level()).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )
