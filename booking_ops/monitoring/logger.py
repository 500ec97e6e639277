"""
Structured logging setup for booking-ops commands.

Uses structlog for context-aware logging. Operator-facing output goes
through ``booking_ops.monitoring.console``; this is the machine trail.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog

from booking_ops.monitoring.redaction import structlog_redaction_processor


def setup_logging(log_level: str = "INFO", log_format: str = "text", log_file: str | None = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_format: Format (json or text)
        log_file: Optional log file path
    """
    level = getattr(logging, log_level.upper())

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )

    processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog_redaction_processor,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # 10MB, 5 backups
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.root.addHandler(file_handler)

        logger = get_logger(__name__)
        logger.info("Logging initialized", log_file=str(log_file), log_level=log_level, log_format=log_format)


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)
