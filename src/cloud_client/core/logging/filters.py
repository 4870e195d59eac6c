"""
Log filters adding correlation IDs and static fields.
"""

import logging
import threading
from typing import Dict, Any, Optional


_correlation_id_storage = threading.local()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set correlation ID for current thread.

    Example:
        >>> set_correlation_id("req-12345")
    """
    _correlation_id_storage.value = correlation_id


def get_correlation_id() -> Optional[str]:
    """Correlation ID of current thread, or None."""
    return getattr(_correlation_id_storage, 'value', None)


def clear_correlation_id() -> None:
    if hasattr(_correlation_id_storage, 'value'):
        delattr(_correlation_id_storage, 'value')


class CorrelationIdFilter(logging.Filter):
    """Adds correlation_id from thread-local storage to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id and not hasattr(record, 'correlation_id'):
            record.correlation_id = correlation_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (cloud name, region, ...) to all records.

    Example:
        >>> handler.addFilter(ExtraFieldsFilter({"region": "RegionOne"}))
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = dict(extra_fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
