"""
Logging system for Cloud Client.

Example:
    >>> from cloud_client.core.logging import CloudClientLogger, LoggingConfig
    >>>
    >>> config = LoggingConfig.create(level="DEBUG", format="json")
    >>> logger = CloudClientLogger(config)
    >>> logger.info("Request started", method="GET", url="https://nova/v2.1/servers")
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import CloudClientLogger
from .formatters import JSONFormatter, TextFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    set_correlation_id,
    get_correlation_id,
    clear_correlation_id,
)

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "CloudClientLogger",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
]
