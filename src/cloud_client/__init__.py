"""Cloud Client - waiting and pagination on top of OpenStack-style REST APIs."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .cloud import Cloud
from .core.config import CloudConfig, TimeoutConfig, WaitSpec
from .core.exceptions import (
    ErrorKind,
    CloudClientException,
    TransientError,
    HTTPError,
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
from .core.error_classifier import classify, to_exception
from .core.waiter import Waiter, WaitOutcome, Ready, Failed, TimedOut, wait
from .core.pagination import Page, PaginatedIterator
from .core.session import Session
from .resources import Resource, ResourceQuery, ResourceType

# Users can configure logging themselves using logging.getLogger('cloud_client')
logging.getLogger('cloud_client').addHandler(logging.NullHandler())

try:
    __version__ = version("cloud-client-core")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Core
    "Cloud",
    "Session",

    # Config
    "CloudConfig",
    "TimeoutConfig",
    "WaitSpec",

    # Exceptions
    "ErrorKind",
    "CloudClientException",
    "TransientError",
    "HTTPError",
    "NotFoundError",
    "ConflictError",
    "InvalidResponseError",
    "ConfigurationError",
    "EndpointNotFoundError",
    "ResourceFailedError",
    "WaitTimeoutError",
    "ResourceNotFoundError",
    "TooManyItemsError",

    # Classification
    "classify",
    "to_exception",

    # Waiting
    "Waiter",
    "WaitOutcome",
    "Ready",
    "Failed",
    "TimedOut",
    "wait",

    # Pagination
    "Page",
    "PaginatedIterator",

    # Resources
    "Resource",
    "ResourceQuery",
    "ResourceType",

    # Version
    "__version__",
]
