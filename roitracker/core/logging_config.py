"""Logging configuration with per-target correlation and log rotation.

Every record is stamped with the id of the object currently being tracked
(``target_id``), so the lines produced while one selection is live can be
pulled out of a long session log.
"""
import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Union

_target_id: ContextVar[Optional[str]] = ContextVar('target_id', default=None)

_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'target_id', 'taskName', 'message', 'asctime',
}


class TargetIDFilter(logging.Filter):
    """Filter to add the current tracking target id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.target_id = _target_id.get() or 'no-target'
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'target_id': getattr(record, 'target_id', 'no-target'),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }
        if record.exc_info:
            entry['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info),
            }
        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra:
            entry['extra'] = extra
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for development and console output."""

    def __init__(self, include_target_id: bool = True):
        format_string = (
            '%(asctime)s - %(name)s - %(levelname)s'
            + (' - %(target_id)s' if include_target_id else '')
            + ' - %(message)s'
        )
        super().__init__(format_string)


class LoggingManager:
    """Central logging manager for the application."""

    def __init__(self):
        self._configured = False
        self._log_dir: Optional[Path] = None
        self._handlers: Dict[str, logging.Handler] = {}

    @property
    def configured(self) -> bool:
        return self._configured

    def configure(
        self,
        log_level: str = 'INFO',
        log_dir: Optional[Union[str, Path]] = None,
        enable_file_logging: bool = True,
        enable_console_logging: bool = True,
        structured_logging: bool = False,
        max_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
        application_name: str = 'roitracker'
    ) -> None:
        """Configure logging for the application.

        Args:
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files
            enable_file_logging: Enable logging to files
            enable_console_logging: Enable console logging
            structured_logging: Use structured JSON logging
            max_file_size: Maximum size of log files before rotation
            backup_count: Number of backup files to keep
            application_name: Name used for log files
        """
        if self._configured:
            return

        level = getattr(logging, log_level.upper(), logging.INFO)
        if enable_file_logging:
            self._log_dir = Path(log_dir or 'logs')
            self._log_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        target_filter = TargetIDFilter()
        formatter = StructuredFormatter() if structured_logging else HumanReadableFormatter()

        if enable_console_logging:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            console_handler.addFilter(target_filter)
            root_logger.addHandler(console_handler)
            self._handlers['console'] = console_handler

        if enable_file_logging and self._log_dir:
            app_handler = logging.handlers.RotatingFileHandler(
                self._log_dir / f'{application_name}.log',
                maxBytes=max_file_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            app_handler.setLevel(level)
            app_handler.setFormatter(formatter)
            app_handler.addFilter(target_filter)
            root_logger.addHandler(app_handler)
            self._handlers['application'] = app_handler

            # Error log file (only ERROR and CRITICAL)
            error_handler = logging.handlers.RotatingFileHandler(
                self._log_dir / f'{application_name}-errors.log',
                maxBytes=max_file_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(formatter)
            error_handler.addFilter(target_filter)
            root_logger.addHandler(error_handler)
            self._handlers['errors'] = error_handler

        self._configured = True
        logging.info(f"Logging configured - Level: {log_level}, File: {enable_file_logging}, Console: {enable_console_logging}")

    def shutdown(self) -> None:
        """Close all handlers."""
        root_logger = logging.getLogger()
        for handler in self._handlers.values():
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers.clear()
        self._configured = False


# Global logging manager instance
logging_manager = LoggingManager()


def configure_logging(**kwargs) -> None:
    """Configure application logging."""
    logging_manager.configure(**kwargs)


def set_target_id(target_id: Optional[str]) -> None:
    _target_id.set(target_id)


def get_target_id() -> Optional[str]:
    return _target_id.get()


def clear_target_id() -> None:
    _target_id.set(None)
