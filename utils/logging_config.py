"""
Logging Configuration

Structured logging for the estate calculators and the plan store.

Every record is one line: [TIMESTAMP] [LEVEL] [module:function:line] MESSAGE,
followed by the user context when a record belongs to a stored plan
(see bind_user). Level comes from LOG_LEVEL, an optional log file from
LOG_FILE.

Copyright (c) 2026 Andreas Wagner. All rights reserved.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_LEVEL_ENV = "LOG_LEVEL"
LOG_FILE_ENV = "LOG_FILE"


class StructuredFormatter(logging.Formatter):
    """
    One-line formatter.

    Format: [TIMESTAMP] [LEVEL] [MODULE:FUNCTION:LINE] MESSAGE user=...
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]

        parts = [
            f"[{timestamp}]",
            f"[{record.levelname:8s}]",
            f"[{record.module}:{record.funcName}:{record.lineno}]",
            record.getMessage(),
        ]

        user_context = getattr(record, 'user_context', '')
        if user_context:
            parts.append(user_context)

        line = " ".join(parts)
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter())
    return handler


def setup_logger(
    name: str,
    level: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Logger with structured console output and optional file output.

    Args:
        name: Logger name (usually __name__)
        level: DEBUG, INFO, WARNING or ERROR; defaults to LOG_LEVEL, else INFO
        log_file: File to append to as well; defaults to LOG_FILE when set

    Returns:
        Configured logger (configured once per name)
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level_name = (level or os.getenv(LOG_LEVEL_ENV, 'INFO')).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(log_level)

    logger.addHandler(_handler(logging.StreamHandler(sys.stdout), log_level))

    log_file = log_file or os.getenv(LOG_FILE_ENV)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_handler(logging.FileHandler(log_file, encoding='utf-8'), log_level))

    logger.propagate = False
    return logger


def bind_user(logger: logging.Logger, user_id: str) -> logging.LoggerAdapter:
    """Adapter that tags every record with user=<user_id>."""
    return logging.LoggerAdapter(logger, {"user_context": f"user={user_id}"})


class PerformanceLogger:
    """Times a block; warns when it exceeds threshold_ms."""

    def __init__(self, logger: logging.Logger, operation: str, threshold_ms: float = 250):
        self.logger = logger
        self.operation = operation
        self.threshold_ms = threshold_ms
        self.start_time = None
        self.duration_ms = None

    def __enter__(self):
        self.start_time = datetime.now()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (datetime.now() - self.start_time).total_seconds() * 1000

        if self.duration_ms > self.threshold_ms:
            self.logger.warning(f"SLOW: {self.operation} took {self.duration_ms:.1f}ms")
        else:
            self.logger.debug(f"{self.operation} took {self.duration_ms:.1f}ms")
        return False


def get_perf_logger(logger: logging.Logger, operation: str, threshold_ms: float = 250):
    """
    Usage:
        with get_perf_logger(logger, "estate_projection", threshold_ms=50):
            projection = _project(calc_input)
    """
    return PerformanceLogger(logger, operation, threshold_ms)


def log_dataframe_info(logger: logging.Logger, df, name: str = "DataFrame"):
    """Log the shape of a Roth projection or scenario table."""
    if df is None:
        logger.warning(f"{name} is None")
    elif df.empty:
        logger.info(f"{name} is empty (0 rows)")
    else:
        logger.debug(f"{name}: {len(df)} rows, columns {', '.join(map(str, df.columns))}")
