#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Logging setup for Display Patcher.

Features:
- Level-specific compact console format, coloured on a TTY (colorlog)
- Optional structured JSON output (--log-json or DISPLAY_PATCHER_LOG_JSON)
- Optional rotating log file
"""

import logging
import logging.handlers
import os
import sys
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any

import colorlog

ROOT_LOGGER_NAME = "display_patcher"
LOG_FILE_NAME = "display_patcher.log"
DEFAULT_MAX_BYTES = 2 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 3

# =====================================================================================================
# Formatters
# =====================================================================================================

_FORMATS = {
    logging.ERROR: "[{asctime}] ERROR   [{name}] {message}",
    logging.WARNING: "[{asctime}] WARNING [{name}] {message}",
    logging.INFO: "[{asctime}] INFO    {message}",
    logging.DEBUG: "[{asctime}] DEBUG   {name}:{lineno} - {message}",
}


class FastFormatter(logging.Formatter):
    """Level-specific plain formatter."""

    def __init__(self):
        super().__init__()
        self._formatters = {
            level: logging.Formatter(fmt, style='{', datefmt='%H:%M:%S')
            for level, fmt in _FORMATS.items()
        }

    def format(self, record):
        formatter = self._formatters.get(record.levelno, self._formatters[logging.INFO])
        return formatter.format(record)


class ColorFormatter(colorlog.ColoredFormatter):
    """Coloured console formatter used when the console stream (stderr) is a terminal."""

    def __init__(self):
        super().__init__(
            "{log_color}[{asctime}] {levelname:<7}{reset} {message}",
            style='{',
            datefmt='%H:%M:%S',
            log_colors={
                'DEBUG': 'blue',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'bold_red',
            },
        )


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter (optional)."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "process": record.process,
        }
        details = getattr(record, "error", None)
        if isinstance(details, dict):
            payload["error"] = details
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

# =====================================================================================================
# Main Setup Function
# =====================================================================================================


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _stream_supports_color(stream) -> bool:
    return (hasattr(stream, 'isatty') and
            stream.isatty() and
            os.environ.get('TERM') != 'dumb' and
            'NO_COLOR' not in os.environ)


def setup_logging(
    log_level: str = "WARNING",
    structured_json: Optional[bool] = None,
    log_dir: Optional[str] = None,
    stream=None,
) -> Dict[str, Any]:
    """Configure the package logger.

    Console output goes to stderr so it never mixes with the CLI summary
    printed on stdout. Handlers are attached to the ``display_patcher``
    logger only; calling this again replaces them.
    """
    numeric_level = getattr(logging, str(log_level).upper(), logging.WARNING)
    use_json = structured_json if structured_json is not None else _env_bool("DISPLAY_PATCHER_LOG_JSON")
    stream = stream if stream is not None else sys.stderr

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(numeric_level)
    package_logger.propagate = False

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    handlers = {}

    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(numeric_level)
    if use_json:
        console_handler.setFormatter(JsonFormatter())
    elif _stream_supports_color(stream):
        console_handler.setFormatter(ColorFormatter())
    else:
        console_handler.setFormatter(FastFormatter())
    package_logger.addHandler(console_handler)
    handlers['console'] = console_handler

    log_dir_path = None
    if log_dir:
        log_dir_path = Path(log_dir)
        log_dir_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            str(log_dir_path / LOG_FILE_NAME),
            maxBytes=DEFAULT_MAX_BYTES,
            backupCount=DEFAULT_BACKUP_COUNT,
            encoding='utf-8',
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonFormatter() if use_json else FastFormatter())
        package_logger.addHandler(file_handler)
        handlers['file'] = file_handler
        # The file always records debug detail.
        package_logger.setLevel(min(numeric_level, logging.DEBUG))

    package_logger.debug("Logging initialized (level=%s, json=%s, log_dir=%s)",
                         log_level, use_json, log_dir_path)

    return {
        'logger': package_logger,
        'handlers': handlers,
        'log_dir': log_dir_path,
    }

# =====================================================================================================
# Utility functions
# =====================================================================================================


def cleanup_logging():
    """Detach and close every handler installed by setup_logging."""
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()
