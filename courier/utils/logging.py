"""Logging utility for the Courier application"""

import json
import logging
import re
from datetime import datetime, timezone
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional

from rich.logging import RichHandler

from .paths import LOGS_DIR

_LOG_DIR: Optional[Path] = None


def _get_log_dir() -> Path:
    """Get log directory, creating it on first access."""

    from .errors import FileSystemError

    global _LOG_DIR

    if _LOG_DIR is None:
        _LOG_DIR = LOGS_DIR
        try:
            _LOG_DIR.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Failed to create log directory: {_LOG_DIR}") from e

    return _LOG_DIR


## Custom JSON Formatter


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for log records."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "command"):
            log_entry["command"] = record.command

        return json.dumps(log_entry, ensure_ascii=False)


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter to add contextual information."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        if "extra" not in kwargs:
            kwargs["extra"] = {}

        kwargs["extra"].update(self.extra)
        return msg, kwargs


## Log Masking


class SensitiveDataMasker:
    """Utility to mask sensitive data in log messages."""

    PATTERNS = {
        "password": re.compile(
            r'(password["\']?\s*[:=]\s*["\']?)([^"\'}\s]+)', re.IGNORECASE
        ),
        "token": re.compile(
            r'(token["\']?\s*[:=]\s*["\']?)([^"\'}\s]+)', re.IGNORECASE
        ),
        "secret": re.compile(
            r'(secret["\']?\s*[:=]\s*["\']?)([^"\'}\s]+)', re.IGNORECASE
        ),
        "authorization": re.compile(
            r'(authorization["\']?\s*[:=]\s*["\']?)([^"\'}\s]+)', re.IGNORECASE
        ),
    }

    SENSITIVE_FIELDS = {
        "password",
        "passwd",
        "secret",
        "token",
        "authorization",
        "credential",
    }

    MASK_STRATEGIES = {
        "full": lambda x: "[REDACTED]",
        "partial": lambda x: x[:3] + "*" * (len(x) - 6) + x[-3:]
        if len(x) > 6
        else "[REDACTED]",
    }

    def __init__(self, strategy: str = "full"):
        """Initialize masker with specified strategy."""

        self.strategy = strategy
        self.mask_func = self.MASK_STRATEGIES[strategy]

    def mask_string(self, text: str) -> str:
        """Mask sensitive data in a string message."""

        if not text or not isinstance(text, str):
            return text

        masked = text
        for pattern in self.PATTERNS.values():
            masked = pattern.sub(
                lambda m: m.group(1) + self.mask_func(m.group(2)), masked
            )

        return masked


class SensitiveDataFilter(logging.Filter):
    """Logging filter to mask sensitive data in log records."""

    def __init__(self, strategy: str = "full"):
        """Initialize filter with specified masking strategy."""

        super().__init__()
        self.masker = SensitiveDataMasker(strategy)

    def filter(self, record) -> bool:
        """Filter log record to mask sensitive data."""

        if isinstance(record.msg, str):
            record.msg = self.masker.mask_string(record.msg)

        for key in list(record.__dict__):
            if key.lower() in self.masker.SENSITIVE_FIELDS:
                setattr(record, key, self.masker.mask_func(str(record.__dict__[key])))

        return True


class ReportedFilter(logging.Filter):
    """Drop records whose text the user has already seen as a status line."""

    def filter(self, record) -> bool:
        return not getattr(record, "reported", False)


## Main Log Manager


class LogManager:
    """Manages logging configuration and provides logger instances."""

    def __init__(self, log_level: str = "INFO", log_to_file: bool = True):
        self.log_level = getattr(logging, log_level.upper())
        self.root_logger = logging.getLogger("courier")
        self.root_logger.setLevel(logging.DEBUG)
        self.log_to_file = log_to_file
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Setup console and file handlers with sensitive data filtering."""

        from .errors import FileSystemError

        sensitive_filter = SensitiveDataFilter(strategy="full")

        self.root_logger.handlers.clear()

        console_handler = RichHandler(
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        console_handler.setLevel(max(self.log_level, logging.WARNING))
        console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        console_handler.addFilter(sensitive_filter)
        console_handler.addFilter(ReportedFilter())
        self.root_logger.addHandler(console_handler)

        if not self.log_to_file:
            return

        try:
            app_handler = RotatingFileHandler(
                _get_log_dir() / "app.log",
                maxBytes=5_242_880,
                backupCount=5,
                encoding="utf-8",
            )
        except OSError as e:
            raise FileSystemError(f"Failed to create app.log handler: {e}") from e

        app_handler.setLevel(logging.DEBUG)
        app_handler.setFormatter(JSONFormatter())
        app_handler.addFilter(sensitive_filter)
        self.root_logger.addHandler(app_handler)

    def set_level(self, level: str) -> None:
        """Set console logging level at runtime"""

        try:
            self.log_level = getattr(logging, level.upper())
        except AttributeError as e:
            raise ValueError(f"Invalid logging level: {level}") from e

        for handler in self.root_logger.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(max(self.log_level, logging.WARNING))


## Decorators for Logging


def log_call(func):
    """Decorator to log function calls and their duration."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger("courier")
        func_name = f"{func.__module__}.{func.__qualname__}"
        logger.debug(f"-> Entering {func_name}")
        start_time = datetime.now()

        try:
            result = func(*args, **kwargs)
            duration = (datetime.now() - start_time).total_seconds()
            logger.debug(f"<- Exiting {func_name} (Duration: {duration:.3f}s)")
            return result

        except Exception as e:
            duration = (datetime.now() - start_time).total_seconds()
            logger.debug(f"<- Error in {func_name} after {duration:.3f}s: {e}")
            raise

    return wrapper


## Module-level LogManager Instance and Helper Functions

_log_manager: Optional[LogManager] = None


def init_logging(log_level: str = "INFO", log_to_file: bool = True) -> LogManager:
    """Initialize logging system and return LogManager instance."""

    global _log_manager

    if _log_manager is None:
        _log_manager = LogManager(log_level, log_to_file=log_to_file)
    else:
        _log_manager.set_level(log_level)

    return _log_manager


def get_logger(name: Optional[str] = None, **context) -> logging.Logger | ContextAdapter:
    """Get a logger instance with optional context.

    Loggers are plain children of the ``courier`` logger, so modules can
    fetch them at import time before handlers are configured.
    """

    if name and (name == "courier" or name.startswith("courier.")):
        name = name[len("courier.") :]

    logger = logging.getLogger(f"courier.{name}" if name else "courier")

    if context:
        return ContextAdapter(logger, context)

    return logger


def reset_logging() -> None:
    """Drop the LogManager and its handlers (for testing purposes)"""

    global _log_manager
    root = logging.getLogger("courier")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    _log_manager = None

