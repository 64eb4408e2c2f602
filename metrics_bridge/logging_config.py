"""Structured logging configuration for the metrics bridge"""
import logging
import os
import sys
from typing import Any, Dict, Optional
import structlog
from structlog.stdlib import LoggerFactory
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, StackInfoRenderer


def setup_structured_logging(settings) -> None:
    """Setup structured logging with JSON format for production and console for development"""

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        TimeStamper(fmt="iso"),
        StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # Use JSON renderer for production, console for development
    is_development = os.getenv("ENVIRONMENT", "production").lower() == "development"
    if is_development:
        processors.append(ConsoleRenderer())
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, settings.log_level.upper())
    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(settings.log_file))
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )

    # Set specific logger levels to reduce noise
    for noisy in ('uvicorn.access', 'httpx', 'httpcore', 'fastapi'):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


def log_server_startup(logger: structlog.stdlib.BoundLogger, settings) -> None:
    """Log server startup with configuration details"""
    logger.info(
        "Server starting up",
        service_name=settings.service_name,
        service_version=settings.service_version,
        metric_prefix=settings.metric_prefix,
        push_enabled=settings.push_enabled,
        push_url=settings.push_url or None,
        metrics_host=settings.metrics_host,
        metrics_port=settings.metrics_port,
        metrics_path=settings.metrics_path,
        event_type="server_startup"
    )


def log_snapshot_published(logger: structlog.stdlib.BoundLogger, records_count: int,
                           elapsed: float, status_code: Optional[int] = None) -> None:
    """Log a completed push of one snapshot"""
    logger.debug(
        "Snapshot pushed",
        records_count=records_count,
        elapsed_seconds=round(elapsed, 3),
        status_code=status_code,
        event_type="snapshot_push"
    )


def log_error(logger: structlog.stdlib.BoundLogger, error: Exception, context: Dict[str, Any] = None) -> None:
    """Log error with structured context"""
    logger.error(
        "Error occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context or {},
        event_type="error",
        exc_info=True
    )
