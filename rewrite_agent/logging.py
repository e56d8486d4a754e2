"""Structured logging configuration for the Article Rewrite Agent."""

import json
import logging
import sys
import time
from typing import Any

import structlog
from structlog import dev, processors, stdlib


def setup_logging(log_level: str = "INFO", json_logging: bool = True) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_logging: Enable JSON formatting
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    processors_list = [
        stdlib.filter_by_level,
        stdlib.add_logger_name,
        stdlib.add_log_level,
        processors.TimeStamper(fmt="iso"),
        processors.format_exc_info,
    ]

    if json_logging:
        processors_list.append(processors.JSONRenderer(serializer=json.dumps))
    else:
        processors_list.append(dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors_list,
        wrapper_class=stdlib.BoundLogger,
        logger_factory=stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_api_request(
    method: str,
    url: str,
    status_code: int | None = None,
    response_time: float | None = None,
    **kwargs: Any
) -> dict[str, Any]:
    """Create a standardized log entry for API requests."""
    log_data = {"event": "api_request", "method": method, "url": url, **kwargs}
    if status_code is not None:
        log_data["status_code"] = status_code
    if response_time is not None:
        log_data["response_time"] = response_time
    return log_data


def log_processing_stage(stage: str, input_count: int, output_count: int, **kwargs: Any) -> dict[str, Any]:
    """Create a standardized log entry for processing stages."""
    return {
        "event": "processing_stage",
        "stage": stage,
        "input_count": input_count,
        "output_count": output_count,
        **kwargs
    }


def log_error(error: Exception, context: str | None = None, **kwargs: Any) -> dict[str, Any]:
    """Create a standardized log entry for errors."""
    log_data = {
        "event": "error",
        "error_type": error.__class__.__name__,
        "error_message": str(error),
        **kwargs
    }
    if context:
        log_data["context"] = context
    return log_data


class PerformanceLogger:
    """Context manager timing an operation.

    Callers may record an outcome with ``set_outcome``; an outcome marked
    unsuccessful is logged as ``operation_aborted`` rather than completed.
    """

    def __init__(self, operation: str, logger: structlog.stdlib.BoundLogger):
        self.operation = operation
        self.logger = logger
        self.start_time: float | None = None
        self.outcome: str | None = None
        self.succeeded = True

    def set_outcome(self, outcome: str, succeeded: bool = True) -> None:
        self.outcome = outcome
        self.succeeded = succeeded

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = time.time()
        self.logger.info("operation_started", operation=self.operation)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return
        duration = time.time() - self.start_time
        if exc_type is not None:
            self.logger.error(
                "operation_failed",
                operation=self.operation,
                duration=duration,
                error_type=exc_type.__name__,
                error_message=str(exc_val) if exc_val else None
            )
        elif not self.succeeded:
            self.logger.warning(
                "operation_aborted",
                operation=self.operation,
                duration=duration,
                outcome=self.outcome
            )
        else:
            self.logger.info(
                "operation_completed",
                operation=self.operation,
                duration=duration,
                outcome=self.outcome
            )
