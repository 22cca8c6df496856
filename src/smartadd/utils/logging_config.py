"""
Logging configuration for smartadd.

Provides terse console output for the CLI, optional structured JSON
logging to a file for RCA, and a per-invocation context that is stamped
onto every record.
"""

import contextvars
import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'message',
}

_NOISY_LOGGERS = ("openai", "httpx", "httpcore", "aiohttp", "urllib3", "asyncio")

_log_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "smartadd_log_context", default={}
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON with context."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        # Add extra fields from record
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ContextFilter(logging.Filter):
    """Add the current invocation context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            setattr(record, key, value)
        return True


_context_filter = ContextFilter()
_cli_handlers: List[logging.Handler] = []


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance."""
    return logging.getLogger(name)


def set_context(**kwargs) -> contextvars.Token:
    """Set logging context for the current invocation. Returns a reset token."""
    context = dict(_log_context.get())
    context.update(kwargs)
    return _log_context.set(context)


def reset_context(token: contextvars.Token) -> None:
    """Restore the context that was active before set_context."""
    _log_context.reset(token)


def get_context() -> Dict[str, Any]:
    return dict(_log_context.get())


def configure_cli_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    """Configure logging for command-line use.

    Console output stays minimal (warnings and errors) unless debug is set;
    a log file, when given, receives structured JSON at DEBUG level.
    """
    root = logging.getLogger()
    # Repeated calls replace the handlers installed by earlier ones
    while _cli_handlers:
        handler = _cli_handlers.pop()
        root.removeHandler(handler)
        handler.close()

    root.setLevel(logging.DEBUG if (debug or log_file) else logging.WARNING)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    console_handler.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))
    console_handler.addFilter(_context_filter)
    root.addHandler(console_handler)
    _cli_handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(_context_filter)
        root.addHandler(file_handler)
        _cli_handlers.append(file_handler)

    # Reduce noise from external libraries
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
