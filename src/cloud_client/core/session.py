# src/cloud_client/core/session.py
import logging
import time
import uuid
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException

from .config import CloudConfig
from .error_classifier import to_exception
from .exceptions import EndpointNotFoundError, InvalidResponseError
from .session_manager import ThreadSafeSessionManager

if TYPE_CHECKING:
    from .logging import CloudClientLogger

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = 'X-OpenStack-Request-ID'


class Session:
    """
    Authenticated transport plus endpoint catalog.

    Один запрос - одна попытка: повторы делают Waiter и потребитель
    PaginatedIterator, а не транспорт. Любая ошибка транспорта или
    HTTP статус >= 400 поднимается как типизированное исключение
    (см. error_classifier.to_exception).

    Thread-safe: каждый поток получает собственную requests.Session.

    Example:
        >>> config = CloudConfig.create(
        ...     endpoints={"compute": "https://nova.example.com/v2.1"},
        ...     token="gAAAA...",
        ... )
        >>> with Session(config) as session:
        ...     body = session.get_json("compute", "servers", "detail")
    """

    def __init__(self, config: Optional[CloudConfig] = None, **kwargs: Any):
        """
        Args:
            config: CloudConfig instance
            **kwargs: Passed to CloudConfig.create() when config is None
        """
        if config is None:
            config = CloudConfig.create(**kwargs)

        self._config = config
        self._session_manager = ThreadSafeSessionManager(session_factory=self._create_session)

        self._logger: Optional['CloudClientLogger'] = None
        if config.logging:
            from .logging import CloudClientLogger
            self._logger = CloudClientLogger(config=config.logging, name="cloud_client.session")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _create_session(self) -> requests.Session:
        """Create configured requests.Session."""
        session = requests.Session()

        # Ретраи не на уровне транспорта
        adapter = HTTPAdapter(max_retries=0)
        session.mount('http://', adapter)
        session.mount('https://', adapter)

        session.headers.update({
            'Accept': 'application/json',
            'User-Agent': 'cloud-client-core',
        })
        if self._config.headers:
            session.headers.update(self._config.headers)
        if self._config.token:
            session.headers['X-Auth-Token'] = self._config.token

        return session

    def close(self) -> None:
        """Закрывает сессии всех потоков и логгер."""
        if self._logger is not None:
            self._logger.close()
        self._session_manager.close_all()

    # ==================== Каталог ====================

    @property
    def config(self) -> CloudConfig:
        return self._config

    @property
    def session(self) -> requests.Session:
        """Thread-local requests.Session."""
        return self._session_manager.get_session()

    def get_endpoint(self, service_type: str) -> str:
        """
        Базовый URL сервиса.

        Запись "<service>:<interface>" (например "compute:internal")
        имеет приоритет над записью "<service>".

        Raises:
            EndpointNotFoundError: Сервиса нет в каталоге
        """
        interface = self._config.endpoint_interface
        endpoint = (
            self._config.endpoints.get(f"{service_type}:{interface}")
            or self._config.endpoints.get(service_type)
        )
        if not endpoint:
            raise EndpointNotFoundError(service_type, self._config.endpoint_interface)
        return endpoint

    def url_for(self, service_type: str, *path: Any) -> str:
        """
        URL ресурса внутри сервиса; сегменты пути экранируются.

        Example:
            >>> session.url_for("compute", "servers", server_id, "action")
            'https://nova.example.com/v2.1/servers/8a1c.../action'
        """
        base = self.get_endpoint(service_type)
        segments = [quote(str(segment).strip('/'), safe='/') for segment in path]
        if not segments:
            return base
        return f"{base}/{'/'.join(segments)}"

    # ==================== Запросы ====================

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> requests.Response:
        """
        Выполнить один HTTP запрос.

        Args:
            method: HTTP метод
            url: Полный URL
            headers: Дополнительные заголовки
            body: Тело запроса (сериализуется в JSON)
            params: Query параметры

        Returns:
            Response со статусом < 400

        Raises:
            CloudClientException: Ошибка транспорта или HTTP статус >= 400
        """
        request_headers: Dict[str, str] = dict(headers or {})
        request_id = request_headers.setdefault(REQUEST_ID_HEADER, f"req-{uuid.uuid4()}")

        if self._logger:
            self._logger.debug(
                "Request started",
                method=method,
                url=url,
                params=dict(params or {}),
                correlation_id=request_id
            )

        start_time = time.time()
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=request_headers,
                json=body,
                params=params,
                timeout=self._config.timeout.as_tuple(),
                verify=self._config.verify_ssl,
            )
        except RequestException as e:
            error = to_exception(e, url)
            self._log_failure(method, url, error, start_time, request_id)
            raise error from e

        if response.status_code >= 400:
            error = to_exception(response, url)
            self._log_failure(method, url, error, start_time, request_id)
            raise error

        if self._logger:
            self._logger.info(
                "Request completed",
                method=method,
                url=url,
                status_code=response.status_code,
                duration_ms=round((time.time() - start_time) * 1000, 2),
                correlation_id=request_id
            )
        else:
            logger.debug("%s %s -> %d", method, url, response.status_code)

        return response

    def _log_failure(self, method, url, error, start_time, request_id) -> None:
        if self._logger:
            self._logger.warning(
                "Request failed",
                method=method,
                url=url,
                error=str(error),
                error_type=type(error).__name__,
                error_kind=error.kind.value,
                duration_ms=round((time.time() - start_time) * 1000, 2),
                correlation_id=request_id
            )
        else:
            logger.debug("%s %s failed (%s): %s", method, url, error.kind.value, error)

    def get_json(
        self,
        service_type: str,
        *path: Any,
        params: Optional[Mapping[str, Any]] = None,
        key: Optional[str] = None
    ) -> Any:
        """
        GET и разбор JSON.

        Args:
            service_type: Сервис в каталоге
            *path: Сегменты пути
            params: Query параметры
            key: Вернуть только этот ключ корня (например "server")
        """
        response = self.request('GET', self.url_for(service_type, *path), params=params)
        return self._json(response, key)

    def post_json(self, service_type: str, *path: Any, body: Any = None, key: Optional[str] = None) -> Any:
        response = self.request('POST', self.url_for(service_type, *path), body=body)
        return self._json(response, key)

    def put_json(self, service_type: str, *path: Any, body: Any = None, key: Optional[str] = None) -> Any:
        response = self.request('PUT', self.url_for(service_type, *path), body=body)
        return self._json(response, key)

    def delete(self, service_type: str, *path: Any) -> None:
        self.request('DELETE', self.url_for(service_type, *path))

    @staticmethod
    def _json(response: requests.Response, key: Optional[str] = None) -> Any:
        if response.status_code == 204 or not response.content:
            if key is not None:
                raise InvalidResponseError(
                    f"Empty response from {response.url}, expected '{key}'"
                )
            return None

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponseError(f"Invalid JSON from {response.url}: {e}") from e

        if key is None:
            return data
        if not isinstance(data, dict) or key not in data:
            raise InvalidResponseError(f"Response from {response.url} has no '{key}'")
        return data[key]
