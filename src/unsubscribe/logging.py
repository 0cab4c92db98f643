"""
Structured logging for the unsubscribe automation.

Every component logs through UnsubscribeLogger, which emits one JSON
document per record with the component name, the current context and any
extra fields. Unsubscribe URLs routinely carry recipient tokens and
signatures, so values are scrubbed before they reach a handler.
"""

import logging
import json
import time
import re
from typing import Dict, Any, Optional
from contextlib import contextmanager
from datetime import datetime, timezone
from collections import Counter, defaultdict


class SensitiveDataFilter:
    """Filter sensitive data from log messages."""

    def __init__(self):
        self.sensitive_patterns = [
            (re.compile(r'token=([^&\s"]+)', re.IGNORECASE), 'token=***'),
            (re.compile(r'password["\']?\s*[:=]\s*["\']?([^"\'\s&]+)', re.IGNORECASE), 'password=***'),
            (re.compile(r'api_key=([^&\s"]+)', re.IGNORECASE), 'api_key=***'),
            (re.compile(r'(?<![a-z_])key=([^&\s"]+)', re.IGNORECASE), 'key=***'),
            (re.compile(r'secret=([^&\s"]+)', re.IGNORECASE), 'secret=***'),
            (re.compile(r'(?<![a-z_])sig(?:nature)?=([^&\s"]+)', re.IGNORECASE), 'sig=***'),
        ]
        self.sensitive_keys = {'password', 'token', 'api_key', 'key', 'secret'}

    def filter_message(self, message: str) -> str:
        """Filter sensitive data from a message string."""
        filtered = message
        for pattern, replacement in self.sensitive_patterns:
            filtered = pattern.sub(replacement, filtered)
        return filtered

    def filter_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Filter sensitive data from a dictionary."""
        filtered = {}
        for key, value in data.items():
            if key.lower() in self.sensitive_keys:
                filtered[key] = '***'
            elif isinstance(value, str):
                filtered[key] = self.filter_message(value)
            elif isinstance(value, dict):
                filtered[key] = self.filter_dict(value)
            else:
                filtered[key] = value
        return filtered


class UnsubscribeLogger:
    """Structured logger with context tracking."""

    def __init__(self, component: str):
        self.component = component
        self.logger = logging.getLogger(f"unsubscribe.{component}")
        self.context: Dict[str, Any] = {}
        self.filter = SensitiveDataFilter()
        self.operation_stats: Dict[str, Counter] = defaultdict(Counter)

    def add_context(self, key: str, value: Any) -> None:
        """Add context information to all subsequent log messages."""
        self.context[key] = value

    def _prepare_log_data(self, message: str, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'component': self.component,
            'message': self.filter.filter_message(message),
            'context': self.filter.filter_dict(self.context.copy())
        }

        if extra:
            log_data['extra'] = self.filter.filter_dict(extra)

        return log_data

    def _emit(self, level: int, message: str, extra: Optional[Dict[str, Any]] = None, **kwargs):
        if not self.logger.isEnabledFor(level):
            return
        log_data = self._prepare_log_data(message, extra)
        self.logger.log(level, json.dumps(log_data, default=str), **kwargs)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit(logging.WARNING, message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit(logging.ERROR, message, extra)

    @contextmanager
    def time_operation(self, operation_name: str):
        """Time the wrapped block and log its duration and outcome."""
        started = time.monotonic()
        self.debug(f"Starting {operation_name}", {"operation": operation_name})
        error = None

        try:
            yield
        except Exception as e:
            error = str(e)
            raise
        finally:
            fields = {
                "operation": operation_name,
                "duration_seconds": round(time.monotonic() - started, 3),
                "status": "success" if error is None else "failure"
            }
            if error is None:
                self.info(f"Operation {operation_name} completed successfully", fields)
            else:
                fields["error"] = error
                self.error(f"Operation {operation_name} failed", fields)

    def log_exception(self, exception: Exception, extra: Optional[Dict[str, Any]] = None):
        """Log exception with full context and traceback."""
        log_data = self._prepare_log_data(f"Exception occurred: {str(exception)}", extra)
        log_data['exception'] = {
            'type': type(exception).__name__,
            'message': self.filter.filter_message(str(exception))
        }

        if getattr(exception, 'context', None):
            log_data['exception']['context'] = self.filter.filter_dict(exception.context)

        self.logger.error(json.dumps(log_data, default=str), exc_info=True)

    @contextmanager
    def scoped_context(self, context: Dict[str, Any]):
        """Context manager for scoped context that is automatically removed."""
        original_context = self.context.copy()
        self.context.update(context)

        try:
            yield
        finally:
            self.context = original_context

    def log_operation_count(self, operation: str, success: bool):
        """Count an operation outcome for statistics."""
        counts = self.operation_stats[operation]
        counts['total'] += 1
        counts['success' if success else 'failure'] += 1

    def get_operation_stats(self) -> Dict[str, Dict[str, int]]:
        """Totals per operation, e.g. {'dispatch': {'total': 3, 'success': 2, 'failure': 1}}."""
        return {
            operation: {key: counts[key] for key in ('total', 'success', 'failure')}
            for operation, counts in self.operation_stats.items()
        }


def configure_unsubscribe_logging(
    level: str = "INFO",
    format: str = "json",
    output: str = "console",
    filename: Optional[str] = None
):
    """Configure the unsubscribe logger hierarchy."""

    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("unsubscribe")
    logger.setLevel(log_level)
    logger.handlers.clear()

    if format == "json":
        formatter = logging.Formatter('%(message)s')
    else:  # standard format
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    if output in ["console", "both"]:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if output in ["file", "both"] and filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
