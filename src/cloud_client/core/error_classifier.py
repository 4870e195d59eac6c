# src/cloud_client/core/error_classifier.py
"""
Классификатор ошибок.

Единственное место, где исход запроса (исключение requests, Response,
статус код) превращается в ErrorKind. Waiter и PaginatedIterator
не смотрят на статус коды сами.
"""

from typing import Any, Optional

import requests
from requests.exceptions import (
    ConnectionError as RequestsConnectionError,
)
from requests.exceptions import (
    RequestException,
    Timeout,
)

from .exceptions import (
    BadRequestError,
    CloudClientException,
    ConflictError,
    ConnectionError,
    DNSError,
    ErrorKind,
    ForbiddenError,
    HTTPError,
    InvalidResponseError,
    NotFoundError,
    ServiceUnavailableError,
    TimeoutError,
    UnauthorizedError,
)

TRANSIENT_STATUS_CODES = frozenset({502, 503, 504})

_FATAL_STATUS_EXCEPTIONS = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
}

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "failed to resolve",
    "getaddrinfo failed",
    "temporary failure in name resolution",
)


def classify_status(status_code: int) -> ErrorKind:
    """
    Классифицировать HTTP статус ошибки.

    Args:
        status_code: HTTP статус (>= 400)

    Returns:
        ErrorKind

    Examples:
        >>> classify_status(503)
        <ErrorKind.TRANSIENT: 'transient'>
        >>> classify_status(500)
        <ErrorKind.FATAL: 'fatal'>
    """
    if status_code in TRANSIENT_STATUS_CODES:
        return ErrorKind.TRANSIENT
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 409:
        return ErrorKind.CONFLICT
    return ErrorKind.FATAL


def classify(outcome: Any) -> ErrorKind:
    """
    Классифицировать исход запроса. Чистая функция, без I/O.

    Args:
        outcome: Наше исключение, исключение requests, requests.Response,
            статус код (int) или ошибка десериализации

    Returns:
        Ровно один ErrorKind
    """
    if isinstance(outcome, CloudClientException):
        return outcome.kind

    if isinstance(outcome, requests.exceptions.HTTPError):
        response = outcome.response
        if response is None:
            return ErrorKind.FATAL
        return classify_status(response.status_code)

    # Timeout раньше ConnectionError: ConnectTimeout наследует оба
    if isinstance(outcome, (Timeout, RequestsConnectionError)):
        return ErrorKind.TRANSIENT

    if isinstance(outcome, RequestException):
        return ErrorKind.FATAL

    if isinstance(outcome, requests.Response):
        return classify_status(outcome.status_code)

    if isinstance(outcome, int) and not isinstance(outcome, bool):
        return classify_status(outcome)

    # ValueError покрывает json.JSONDecodeError
    return ErrorKind.FATAL


def exception_for_status(
    status_code: int,
    url: Optional[str] = None,
    message: str = ""
) -> CloudClientException:
    """Создать типизированное исключение для HTTP статуса."""
    kind = classify_status(status_code)

    if kind is ErrorKind.TRANSIENT:
        return ServiceUnavailableError(status_code, url, message)
    if kind is ErrorKind.NOT_FOUND:
        return NotFoundError(url, message)
    if kind is ErrorKind.CONFLICT:
        return ConflictError(url, message)

    exc_class = _FATAL_STATUS_EXCEPTIONS.get(status_code)
    if exc_class is not None:
        return exc_class(url, message)
    return HTTPError(status_code, url, message)


def to_exception(outcome: Any, url: Optional[str] = None) -> CloudClientException:
    """
    Конвертировать исход в наше исключение.

    kind результата всегда равен classify(outcome).

    Args:
        outcome: Исход запроса (см. classify)
        url: URL запроса (для сообщения)

    Returns:
        CloudClientException с правильной классификацией

    Examples:
        >>> exc = to_exception(requests.exceptions.ReadTimeout(), "https://example.com")
        >>> assert isinstance(exc, TimeoutError)
        >>> assert exc.retryable
    """
    if isinstance(outcome, CloudClientException):
        return outcome

    if isinstance(outcome, requests.exceptions.HTTPError):
        response = outcome.response
        if response is None:
            return HTTPError(0, url, "HTTP error without response")
        return exception_for_status(
            response.status_code,
            url or str(response.url),
            _response_excerpt(response)
        )

    if isinstance(outcome, Timeout):
        timeout_type = "connect" if isinstance(outcome, requests.exceptions.ConnectTimeout) else "read"
        return TimeoutError("Request timeout", url, timeout_type)

    if isinstance(outcome, RequestsConnectionError):
        text = str(outcome).lower()
        if any(marker in text for marker in _DNS_MARKERS):
            return DNSError("DNS resolution failed", url)
        return ConnectionError("Connection error", url)

    # requests.JSONDecodeError тоже ValueError
    if isinstance(outcome, ValueError):
        return InvalidResponseError(f"Invalid response: {outcome}")

    if isinstance(outcome, RequestException):
        return CloudClientException(f"Request failed: {outcome}")

    if isinstance(outcome, requests.Response):
        return exception_for_status(
            outcome.status_code,
            url or str(outcome.url),
            _response_excerpt(outcome)
        )

    if isinstance(outcome, int) and not isinstance(outcome, bool):
        return exception_for_status(outcome, url)

    return CloudClientException(f"Unexpected error: {outcome!r}")


def _response_excerpt(response: requests.Response) -> str:
    """Первые 200 символов тела ответа для сообщения."""
    try:
        text = response.text
    except (UnicodeDecodeError, RuntimeError):
        return ""
    return text[:200] if text else ""
