"""Logging configuration for fs-mutex.

The library itself only logs through module loggers; applications that
want output call ``setup_logging()`` once at startup. Supported:
- Environment variable-based log level control
- JSON formatting for production monitoring
- Optional rotating JSON log file
"""

import logging
import logging.handlers
import json
import os
import sys
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Union
from pathlib import Path

_STANDARD_RECORD_FIELDS = frozenset([
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info', 'taskName',
])


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    def __init__(self, include_context: bool = True):
        """
        Initialize JSON formatter.

        Args:
            include_context: Whether to include module/function/line fields
        """
        super().__init__()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_data: Dict[str, Any] = {
            'timestamp': timestamp.isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'pid': record.process,
        }

        if self.include_context:
            log_data['module'] = record.module
            log_data['function'] = record.funcName
            log_data['line'] = record.lineno

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Fields passed through ``extra=``
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_FIELDS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """One line per record; the lock key is shown when the record has one."""

    def __init__(self, include_context: bool = False):
        if include_context:
            fmt = '[%(levelname)s] %(asctime)s - pid %(process)d - %(name)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s'
        else:
            fmt = '[%(levelname)s] %(asctime)s - pid %(process)d - %(name)s - %(message)s'

        super().__init__(fmt=fmt, datefmt='%Y-%m-%d %H:%M:%S')

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        lock_key = getattr(record, 'lock_key', None)
        if lock_key is not None:
            return f"{formatted} [lock={lock_key}]"

        return formatted


def get_log_level_from_env() -> int:
    """
    Get log level from environment variable.

    Environment variables checked (in order):
    1. FSMUTEX_LOG_LEVEL
    2. LOG_LEVEL

    Returns:
        Logging level (default: INFO)
    """
    level_name = os.environ.get('FSMUTEX_LOG_LEVEL') or os.environ.get('LOG_LEVEL', 'INFO')
    level_name = level_name.upper()

    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'WARN': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL,
    }

    return level_map.get(level_name, logging.INFO)


def get_log_format_from_env() -> str:
    """Return FSMUTEX_LOG_FORMAT ('json', 'human', 'simple'), default 'human'."""
    return os.environ.get('FSMUTEX_LOG_FORMAT', 'human').lower()


def setup_logging(
    level: Optional[int] = None,
    format_type: Optional[str] = None,
    log_file: Optional[Path] = None,
    include_context: bool = False
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level (defaults to FSMUTEX_LOG_LEVEL or INFO)
        format_type: Format type ('json', 'human', 'simple')
        log_file: Optional path to log file
        include_context: Include module/function context in logs

    Environment Variables:
        FSMUTEX_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        FSMUTEX_LOG_FORMAT: Set format (json, human, simple)
        FSMUTEX_LOG_FILE: Path to log file
        LOG_LEVEL: Fallback for log level

    Examples:
        >>> setup_logging(level=logging.DEBUG, format_type='json')
    """
    if level is None:
        level = get_log_level_from_env()

    if format_type is None:
        format_type = get_log_format_from_env()

    if log_file is None:
        log_file_env = os.environ.get('FSMUTEX_LOG_FILE')
        if log_file_env:
            log_file = Path(log_file_env)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()

    formatter: logging.Formatter
    if format_type == 'json':
        formatter = JSONFormatter(include_context=include_context)
    elif format_type == 'simple':
        formatter = logging.Formatter('%(levelname)s: %(message)s')
    else:  # human
        formatter = HumanReadableFormatter(include_context=include_context)

    # stderr keeps stdout free for the host program
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(level)

        # Always use JSON for file logs
        file_handler.setFormatter(JSONFormatter(include_context=True))
        root_logger.addHandler(file_handler)


def get_logger(name: str, extra: Optional[Dict[str, Any]] = None) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Get a logger with optional extra context.

    Example:
        >>> logger = get_logger(__name__, extra={'lock_key': 'nightly-report'})
        >>> logger.info("Waiting for lock")
    """
    logger = logging.getLogger(name)

    if extra:
        return logging.LoggerAdapter(logger, extra)

    return logger
