"""
Structured logger for Cloud Client.

Wraps a standard ``logging.Logger``: keyword fields become record
attributes (rendered by the formatters) after secrets are masked.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, List, Optional

from .config import LoggingConfig
from .formatters import get_formatter
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from ...utils.sanitizer import mask_sensitive_data


class CloudClientLogger:
    """
    Structured logger with console and rotating file output.

    Example:
        >>> logger = CloudClientLogger(LoggingConfig.create(level="DEBUG"))
        >>> logger.info("Request started", method="GET", url="https://nova/v2.1/servers")
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = "cloud_client"):
        """
        Args:
            config: Logging configuration (defaults if None)
            name: Logger name
        """
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        level = getattr(logging, self.config.level.value)

        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False
        self._logger.handlers.clear()

        filters: List[logging.Filter] = []
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)

        if self.config.enable_console:
            self._add_handler(logging.StreamHandler(sys.stderr), level, formatter, filters)

        if self.config.enable_file and self.config.file_path:
            Path(self.config.file_path).parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=self.config.file_path,
                maxBytes=self.config.max_bytes,
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
            self._add_handler(file_handler, level, formatter, filters)

    def _add_handler(
        self,
        handler: logging.Handler,
        level: int,
        formatter: logging.Formatter,
        filters: List[logging.Filter]
    ) -> None:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        for f in filters:
            handler.addFilter(f)
        self._logger.addHandler(handler)

    @property
    def logger(self) -> logging.Logger:
        """Underlying standard logger."""
        return self._logger

    def _log(self, level: int, message: str, fields: dict, exc_info: bool = False) -> None:
        self._logger.log(level, message, extra=mask_sensitive_data(fields), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log info message.

        Example:
            >>> logger.info("Request completed", status_code=200, duration_ms=150)
        """
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log error with traceback. Call from an exception handler."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def close(self) -> None:
        """
        Flush and close all handlers. Idempotent.
        """
        if self._closed:
            return

        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
