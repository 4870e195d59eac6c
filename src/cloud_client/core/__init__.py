"""Core Cloud Client модули."""

from .config import (
    TimeoutConfig,
    WaitSpec,
    CloudConfig,
)
from .exceptions import (
    ErrorKind,
    CloudClientException,
    TransientError,
    NetworkError,
    TimeoutError,
    ConnectionError,
    DNSError,
    ServiceUnavailableError,
    HTTPError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    InvalidResponseError,
    ConfigurationError,
    EndpointNotFoundError,
    ResourceFailedError,
    WaitTimeoutError,
    ResourceNotFoundError,
    TooManyItemsError,
)
from .error_classifier import classify, classify_status, to_exception
from .waiter import Waiter, WaitOutcome, Ready, Failed, TimedOut, wait
from .pagination import Page, PageCursor, IteratorState, PaginatedIterator
from .session import Session
from .session_manager import ThreadSafeSessionManager

__all__ = [
    # Config
    "TimeoutConfig",
    "WaitSpec",
    "CloudConfig",

    # Exceptions
    "ErrorKind",
    "CloudClientException",
    "TransientError",
    "NetworkError",
    "TimeoutError",
    "ConnectionError",
    "DNSError",
    "ServiceUnavailableError",
    "HTTPError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "InvalidResponseError",
    "ConfigurationError",
    "EndpointNotFoundError",
    "ResourceFailedError",
    "WaitTimeoutError",
    "ResourceNotFoundError",
    "TooManyItemsError",

    # Classifier
    "classify",
    "classify_status",
    "to_exception",

    # Waiter
    "Waiter",
    "WaitOutcome",
    "Ready",
    "Failed",
    "TimedOut",
    "wait",

    # Pagination
    "Page",
    "PageCursor",
    "IteratorState",
    "PaginatedIterator",

    # Session
    "Session",
    "ThreadSafeSessionManager",
]
