"""
Logging setup for the bundle relay client.
"""

import logging
import sys
from typing import Optional

import structlog

from bundler.config import get_config


def setup_logging(level: Optional[str] = None, json_format: Optional[bool] = None) -> None:
    """
    Configure structured logging.

    Args:
        level: Logging level name. Defaults to the configured log_level.
        json_format: Render JSON instead of console output. Defaults to the
            configured log_json.
    """
    config = get_config()
    level = level or config.log_level
    if json_format is None:
        json_format = config.log_json

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
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stdout,
    )
