# ============================================================================
# src/utils/logging.py
# ============================================================================
"""
Logging helpers for the document filing engine.

- setup_logging: root handlers (console, optional file), plain or JSON lines
- JsonFormatter: one JSON object per record, `extra` fields included
- LogContext: stamps fields (file name, content hash) on every record
  created while a pipeline run is in progress
- log_performance: duration logging for plain and async callables
- LogAdapter: fixed fields merged into every call's `extra`
"""

import asyncio
import functools
import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

TEXT_FORMAT = '%(asctime)s %(levelname)-8s %(name)s: %(message)s'
TEXT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Attributes every LogRecord carries; anything else was added via `extra`
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


def _build_formatter(format_json: bool) -> logging.Formatter:
    if format_json:
        return JsonFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_json: bool = False
) -> None:
    """
    Replace the root handlers.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Also append records to this file
        format_json: JSON lines instead of plain text
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    formatter = _build_formatter(format_json)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)


class JsonFormatter(logging.Formatter):
    """Serializes a record, plus anything passed via `extra`, as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        extra = {
            key: value for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith('_')
        }
        if extra:
            payload['extra'] = extra
        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    """Module logger (pass __name__)."""
    return logging.getLogger(name)


class LogContext:
    """
    Stamps fields onto every record created inside the block.

    The orchestrator wraps each run so every stage's records carry the file
    name and content hash:

        with LogContext(logger, file_name=name, content_hash=digest):
            ...
    """

    def __init__(self, logger: logging.Logger, **fields):
        self.logger = logger
        self.fields = fields
        self._previous_factory = None

    def __enter__(self):
        previous = logging.getLogRecordFactory()
        fields = self.fields

        def stamped_factory(*args, **kwargs):
            record = previous(*args, **kwargs)
            record.__dict__.update(fields)
            return record

        self._previous_factory = previous
        logging.setLogRecordFactory(stamped_factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.setLogRecordFactory(self._previous_factory)


def log_performance(logger: logging.Logger, operation: str):
    """
    Decorator logging how long a call took (INFO), or how long it ran
    before failing (ERROR, exception re-raised). Works on coroutines too.
    """
    def report(started: float, error: Optional[BaseException] = None) -> None:
        elapsed = time.perf_counter() - started
        if error is None:
            logger.info(f"{operation} completed in {elapsed:.3f}s")
        else:
            logger.error(f"{operation} failed after {elapsed:.3f}s: {error}")

    def decorator(func):
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def timed_coroutine(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    report(started, e)
                    raise
                report(started)
                return result
            return timed_coroutine

        @functools.wraps(func)
        def timed(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                report(started, e)
                raise
            report(started)
            return result
        return timed

    return decorator


class LogAdapter(logging.LoggerAdapter):
    """Adds fixed fields to every record; fields passed at the call site win."""

    def process(self, msg, kwargs):
        kwargs['extra'] = {**self.extra, **(kwargs.get('extra') or {})}
        return msg, kwargs
