"""
Centralized logging for Leadlens.

structlog renders through stdlib logging to stdout and, optionally, a rotating
log file. Every event passes through two processors before rendering: one
strips personal data from any ``payload`` field, the other masks secrets.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog

from core.log_masking import mask_log_data, sanitize_payload

SERVICE_NAME = "leadlens"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Libraries that are too chatty below WARNING
QUIET_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "fastapi",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "httpx",
    "httpcore",
)


def add_service_name(logger, method_name, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def strip_payload_pii(logger, method_name, event_dict):
    """Event payloads are user-supplied; never log them unsanitised."""
    if "payload" in event_dict:
        event_dict["payload"] = sanitize_payload(event_dict["payload"])
    return event_dict


def mask_sensitive_data(logger, method_name, event_dict):
    return mask_log_data(event_dict)


def _file_handler(log_file: str, level: int) -> Optional[logging.Handler]:
    try:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding='utf-8'
        )
    except OSError as e:
        logging.getLogger().warning(f"Failed to setup file logging: {e}")
        return None

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_file_logging: bool = True
) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to the rotating log file (defaults to logs/app.log)
        enable_file_logging: Whether to write the log file at all
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    if enable_file_logging:
        log_file = log_file or "logs/app.log"
        handler = _file_handler(log_file, numeric_level)
        if handler is not None:
            root_logger.addHandler(handler)
            root_logger.info(f"Logging to file: {log_file}")

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            add_service_name,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            strip_payload_pii,
            mask_sensitive_data,
            structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger bound to ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)
