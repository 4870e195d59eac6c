"""
Иерархия исключений Cloud Client.

Классификация (ErrorKind):
- TRANSIENT - можно ретраить (таймауты, сетевые ошибки, 502/503/504)
- NOT_FOUND - ресурс исчез (404)
- CONFLICT - конкурентное изменение состояния (409)
- FATAL - НЕ ретраить никогда (остальные 4xx/5xx, битый JSON, конфиг)
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Закрытый набор видов ошибок."""
    TRANSIENT = "transient"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FATAL = "fatal"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class CloudClientException(Exception):
    """Базовое исключение Cloud Client."""

    kind: ErrorKind = ErrorKind.FATAL

    def __init__(self, message: str, **kwargs):
        self.message = message
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """Можно ли повторить операцию без изменений."""
        return self.kind is ErrorKind.TRANSIENT

    @property
    def fatal(self) -> bool:
        return self.kind is ErrorKind.FATAL

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ВРЕМЕННЫЕ ОШИБКИ (TRANSIENT)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransientError(CloudClientException):
    """
    Временная ошибка - можно ретраить.

    Примеры: таймауты, обрыв соединения, 502/503/504 от балансировщика.
    """
    kind = ErrorKind.TRANSIENT

class NetworkError(TransientError):
    """Сетевая ошибка."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        full_message = f"{message}"
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message)

class TimeoutError(NetworkError):
    """
    Таймаут запроса.

    Args:
        message: Сообщение об ошибке
        url: URL запроса
        timeout_type: Тип таймаута ('connect' или 'read')
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout_type: Optional[str] = None
    ):
        self.timeout_type = timeout_type

        msg = message
        if timeout_type:
            msg += f" ({timeout_type} timeout)"

        super().__init__(msg, url)

class ConnectionError(NetworkError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - Network unreachable
    """
    pass

class DNSError(ConnectionError):
    """DNS resolution failed."""
    pass

class ServiceUnavailableError(TransientError):
    """
    502/503/504 - сервис временно недоступен.

    Args:
        status_code: HTTP статус код
        url: URL
        message: Тело ответа (обрезанное)
    """

    def __init__(self, status_code: int, url: Optional[str] = None, message: str = ""):
        self.status_code = status_code
        self.url = url

        msg = f"HTTP {status_code} error for {url}"
        if message:
            msg += f": {message}"

        super().__init__(msg)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HTTP ОШИБКИ (FATAL / NOT_FOUND / CONFLICT)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPError(CloudClientException):
    """
    HTTP ошибка, которую нельзя ретраить.

    Args:
        status_code: HTTP статус
        url: URL
        message: Сообщение
    """

    def __init__(self, status_code: int, url: Optional[str] = None, message: str = ""):
        self.status_code = status_code
        self.url = url

        msg = f"HTTP {status_code} error for {url}"
        if message:
            msg += f": {message}"

        super().__init__(msg)

class BadRequestError(HTTPError):
    """400 Bad Request."""

    def __init__(self, url: Optional[str] = None, message: str = ""):
        super().__init__(400, url, message)

class UnauthorizedError(HTTPError):
    """401 Unauthorized."""

    def __init__(self, url: Optional[str] = None, message: str = ""):
        super().__init__(401, url, message)

class ForbiddenError(HTTPError):
    """403 Forbidden."""

    def __init__(self, url: Optional[str] = None, message: str = ""):
        super().__init__(403, url, message)

class NotFoundError(HTTPError):
    """404 Not Found - ресурс исчез."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, url: Optional[str] = None, message: str = ""):
        super().__init__(404, url, message)

class ConflictError(HTTPError):
    """409 Conflict - состояние ресурса изменилось параллельно."""
    kind = ErrorKind.CONFLICT

    def __init__(self, url: Optional[str] = None, message: str = ""):
        super().__init__(409, url, message)

class InvalidResponseError(CloudClientException):
    """
    Невалидный ответ.

    Примеры:
    - Битый JSON
    - Нет ожидаемого ключа в теле
    - Сервис повторил тот же marker
    """
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# КОНФИГУРАЦИЯ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ConfigurationError(CloudClientException):
    """Ошибка конфигурации."""
    pass

class EndpointNotFoundError(ConfigurationError):
    """Сервис отсутствует в каталоге endpoints."""

    def __init__(self, service_type: str, interface: Optional[str] = None):
        self.service_type = service_type
        self.interface = interface

        msg = f"No endpoint for service '{service_type}'"
        if interface:
            msg += f" (interface: {interface})"

        super().__init__(msg)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ОЖИДАНИЕ И ЗАПРОСЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ResourceFailedError(CloudClientException):
    """
    Ожидание завершилось неудачей.

    Args:
        kind: Вид ошибки из исхода ожидания
        context: Описание (статус ресурса или текст последней ошибки)
        description: Что ожидали
    """

    def __init__(
        self,
        kind: ErrorKind,
        context: str,
        description: Optional[str] = None
    ):
        self.kind = kind
        self.context = context
        self.description = description

        msg = f"Wait failed ({kind.value})"
        if description:
            msg += f" for {description}"
        msg += f": {context}"

        super().__init__(msg)

class WaitTimeoutError(CloudClientException):
    """
    Дедлайн ожидания истёк, а ресурс всё ещё в процессе.

    Args:
        elapsed: Прошло секунд
        polls: Сколько раз опрашивали
        description: Что ожидали
    """
    kind = ErrorKind.TRANSIENT

    def __init__(
        self,
        elapsed: float,
        polls: int,
        description: Optional[str] = None
    ):
        self.elapsed = elapsed
        self.polls = polls
        self.description = description

        msg = f"Timed out after {elapsed:.1f}s ({polls} polls)"
        if description:
            msg += f" waiting for {description}"

        super().__init__(msg)

class ResourceNotFoundError(CloudClientException):
    """Запрос one() не вернул ни одного ресурса."""
    kind = ErrorKind.NOT_FOUND

class TooManyItemsError(CloudClientException):
    """Запрос one() вернул больше одного ресурса."""
    pass
