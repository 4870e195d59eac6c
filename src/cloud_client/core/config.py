"""
Система конфигурации для Cloud Client.

Все конфиги immutable (frozen dataclasses) для потокобезопасности.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Dict, Union, TYPE_CHECKING, Mapping
from types import MappingProxyType

if TYPE_CHECKING:
    from .logging import LoggingConfig

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Конфигурация таймаутов одного HTTP запроса.

    Args:
        connect: Таймаут подключения (сек)
        read: Таймаут чтения данных (сек)

    Examples:
        >>> TimeoutConfig(connect=5, read=30)
    """
    connect: float = 5
    read: float = 30

    def __post_init__(self):
        """Валидация."""
        if self.connect <= 0:
            raise ValueError("connect timeout must be positive")
        if self.read <= 0:
            raise ValueError("read timeout must be positive")

    def as_tuple(self) -> Tuple[float, float]:
        """Вернуть как (connect, read) для requests."""
        return (self.connect, self.read)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# WAIT SPEC
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class WaitSpec:
    """
    Параметры одного ожидания ресурса.

    Args:
        poll_interval: Задержка между опросами (сек), > 0
        timeout: Общий лимит времени на все опросы (сек), None - без лимита
        max_transient_retries: Сколько временных ошибок терпеть за всё ожидание
        backoff_factor: Множитель задержки (1.0 - фиксированная задержка)
        backoff_max: Максимальная задержка (сек)

    Examples:
        >>> WaitSpec(poll_interval=2, timeout=600)
        >>> WaitSpec(poll_interval=1, backoff_factor=2.0, backoff_max=30)
    """
    poll_interval: float = 1.0
    timeout: Optional[float] = None
    max_transient_retries: int = 3
    backoff_factor: float = 1.0
    backoff_max: float = 60.0

    def __post_init__(self):
        """Валидация."""
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_transient_retries < 0:
            raise ValueError("max_transient_retries must be non-negative")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")
        if self.backoff_max <= 0:
            raise ValueError("backoff_max must be positive")

    def delay_for(self, retry_number: int) -> float:
        """
        Задержка перед повтором номер retry_number (с нуля).

        Examples:
            >>> WaitSpec(poll_interval=1, backoff_factor=2.0).delay_for(3)
            8.0
        """
        cap = max(self.backoff_max, self.poll_interval)
        try:
            delay = self.poll_interval * (self.backoff_factor ** retry_number)
        except OverflowError:
            # Степень не помещается во float - давно упёрлись в cap
            return cap
        return min(delay, cap)

    def with_timeout(self, timeout: Optional[float]) -> 'WaitSpec':
        """Копия с другим дедлайном."""
        return replace(self, timeout=timeout)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _freeze_dict(d: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    """Convert dict to immutable MappingProxyType."""
    if d is None:
        return MappingProxyType({})
    return MappingProxyType(dict(d))

@dataclass(frozen=True)
class CloudConfig:
    """
    Главная конфигурация Cloud.

    Args:
        endpoints: Каталог endpoints: service_type -> базовый URL
        token: Токен (отправляется в X-Auth-Token)
        endpoint_interface: Интерфейс endpoints (public/internal/admin)
        region_name: Регион
        timeout: Таймауты одного запроса
        verify_ssl: Проверять SSL сертификаты
        headers: Дефолтные заголовки
        wait: WaitSpec по умолчанию для ожиданий ресурсов
        page_size: Размер страницы list запросов (None - решает сервис)
        logging: Конфигурация логирования (None = без структурного лога)

    Examples:
        >>> config = CloudConfig.create(
        ...     endpoints={"compute": "https://nova.example.com/v2.1"},
        ...     token="gAAAA...",
        ... )
    """
    endpoints: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    token: Optional[str] = None
    endpoint_interface: str = "public"
    region_name: Optional[str] = None
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    verify_ssl: bool = True
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    wait: WaitSpec = field(default_factory=WaitSpec)
    page_size: Optional[int] = None
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Freeze mutable dicts and normalize endpoint URLs."""
        endpoints = {
            service: url.rstrip('/')
            for service, url in dict(self.endpoints).items()
        }
        object.__setattr__(self, 'endpoints', MappingProxyType(endpoints))

        if isinstance(self.headers, dict):
            object.__setattr__(self, 'headers', _freeze_dict(self.headers))

        if self.endpoint_interface not in ('public', 'internal', 'admin'):
            raise ValueError(
                f"endpoint_interface must be public, internal or admin, "
                f"got {self.endpoint_interface!r}"
            )
        if self.page_size is not None and self.page_size <= 0:
            raise ValueError("page_size must be positive")

    @classmethod
    def create(
        cls,
        endpoints: Optional[Dict[str, str]] = None,
        token: Optional[str] = None,
        timeout: Union[float, Tuple[float, float], TimeoutConfig] = 30,
        poll_interval: Optional[float] = None,
        wait_timeout: Optional[float] = None,
        max_transient_retries: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
        logging: Optional['LoggingConfig'] = None,
        **kwargs
    ) -> 'CloudConfig':
        """
        Удобный конструктор конфигурации.

        Args:
            endpoints: Каталог endpoints
            token: Токен
            timeout: Таймаут (число, (connect, read) или TimeoutConfig)
            poll_interval: Интервал опроса для WaitSpec по умолчанию
            wait_timeout: Дедлайн для WaitSpec по умолчанию
            max_transient_retries: Лимит временных ошибок для WaitSpec
            headers: Заголовки
            logging: Конфигурация логирования

        Returns:
            CloudConfig instance

        Examples:
            >>> config = CloudConfig.create(timeout=(5, 60), wait_timeout=900)
        """
        wait_kwargs = {}
        if poll_interval is not None:
            wait_kwargs['poll_interval'] = poll_interval
        if wait_timeout is not None:
            wait_kwargs['timeout'] = wait_timeout
        if max_transient_retries is not None:
            wait_kwargs['max_transient_retries'] = max_transient_retries

        return cls(
            endpoints=endpoints or {},
            token=token,
            timeout=_timeout_config(timeout),
            headers=headers or {},
            wait=WaitSpec(**wait_kwargs),
            logging=logging,
            **kwargs
        )

    def with_endpoint_interface(self, endpoint_interface: str) -> 'CloudConfig':
        """
        Создать новый конфиг с другим интерфейсом endpoints.

        Example:
            >>> internal = config.with_endpoint_interface("internal")
        """
        return replace(self, endpoint_interface=endpoint_interface)

    def with_endpoint(self, service_type: str, url: str) -> 'CloudConfig':
        """Создать новый конфиг с добавленным (или заменённым) endpoint."""
        merged = dict(self.endpoints)
        merged[service_type] = url
        return replace(self, endpoints=merged)

    def with_wait(self, wait: WaitSpec) -> 'CloudConfig':
        """Создать новый конфиг с другим WaitSpec по умолчанию."""
        return replace(self, wait=wait)

    def with_headers(self, headers: Dict[str, str]) -> 'CloudConfig':
        """Создать новый конфиг с дополнительными заголовками."""
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)


def _timeout_config(timeout: Union[float, Tuple[float, float], TimeoutConfig]) -> TimeoutConfig:
    if isinstance(timeout, TimeoutConfig):
        return timeout
    if isinstance(timeout, tuple):
        return TimeoutConfig(connect=timeout[0], read=timeout[1])
    return TimeoutConfig(connect=5, read=timeout)
