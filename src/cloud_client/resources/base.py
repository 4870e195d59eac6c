"""
Фасады ресурсов.

ResourceType - где живёт ресурс и как устроен его JSON.
Resource - read-only представление одного ресурса с ожиданиями.
ResourceQuery - list запросы через PaginatedIterator.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..core.config import WaitSpec
from ..core.exceptions import (
    ErrorKind,
    InvalidResponseError,
    NotFoundError,
    ResourceNotFoundError,
    TooManyItemsError,
)
from ..core.pagination import Page, PaginatedIterator
from ..core.session import Session
from ..core.waiter import Failed, Ready, WaitOutcome, Waiter

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RESOURCE TYPE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ResourceType:
    """
    Описание типа ресурса.

    Args:
        name: Имя для логов ("server")
        service_type: Сервис в каталоге ("compute")
        path: Путь коллекции ("servers")
        collection_key: Ключ списка в ответе ("servers")
        resource_key: Ключ ресурса в ответе ("server"), None - тело и есть ресурс
        list_path: Путь для list запроса, если отличается ("servers/detail")
        item_key: Ключ-обёртка каждого элемента списка ("keypair")
        id_field: Поле идентификатора
        status_field: Поле статуса (None - у ресурса нет статуса)
        error_statuses: Статусы, означающие ошибку ресурса
        fault_field: Поле с описанием ошибки ("fault")
        name_filter: Query параметр фильтра по имени
        paginated: Поддерживает ли сервис limit/marker
    """
    name: str
    service_type: str
    path: str
    collection_key: str
    resource_key: Optional[str] = None
    list_path: Optional[str] = None
    item_key: Optional[str] = None
    id_field: str = "id"
    status_field: Optional[str] = "status"
    error_statuses: Tuple[str, ...] = ("ERROR",)
    fault_field: Optional[str] = None
    name_filter: Optional[str] = "name"
    paginated: bool = True

    @property
    def links_key(self) -> str:
        return f"{self.collection_key}_links"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RESOURCE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Resource(Mapping[str, Any]):
    """
    Read-only представление одного ресурса.

    Example:
        >>> server = cloud.get_server("8a1c355b-2e1e-440a-8aa8-f272df72bc32")
        >>> server.status
        'BUILD'
        >>> server.wait_for_status("ACTIVE").unwrap()
    """

    def __init__(self, session: Session, resource_type: ResourceType, data: Mapping[str, Any]):
        self._session = session
        self._type = resource_type
        self._data = dict(data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"<Resource {self._type.name} id={self.id!r} name={self.name!r}>"

    @property
    def resource_type(self) -> ResourceType:
        return self._type

    @property
    def id(self) -> Any:
        return self._data.get(self._type.id_field)

    @property
    def name(self) -> Optional[str]:
        return self._data.get("name")

    @property
    def status(self) -> Optional[str]:
        if self._type.status_field is None:
            return None
        return self._data.get(self._type.status_field)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def refresh(self) -> "Resource":
        """Перечитать ресурс из сервиса."""
        self._data = dict(self._fetch())
        return self

    def delete(self) -> None:
        """Запросить удаление. Завершение - через wait_for_deletion()."""
        self._session.delete(self._type.service_type, self._type.path, self.id)

    def _fetch(self) -> Mapping[str, Any]:
        return _load(self._session, self._type, self.id)

    def _describe(self) -> str:
        return f"{self._type.name} {self.id}"

    def wait_for_status(
        self,
        target: Any,
        error_statuses: Optional[Sequence[str]] = None,
        spec: Optional[WaitSpec] = None,
        **waiter_kwargs: Any
    ) -> WaitOutcome:
        """
        Ждать, пока статус ресурса не станет target.

        Args:
            target: Целевой статус или несколько статусов
            error_statuses: Статусы ошибки (по умолчанию из ResourceType)
            spec: Параметры ожидания (по умолчанию из CloudConfig.wait)
            **waiter_kwargs: sleep/clock для Waiter

        Returns:
            Ready(self) с обновлёнными данными, Failed или TimedOut
        """
        if self._type.status_field is None:
            raise TypeError(f"{self._type.name} has no status to wait for")

        targets = _status_set([target] if isinstance(target, str) else target)
        errors = _status_set(self._type.error_statuses if error_statuses is None else error_statuses)

        def is_ready(state: Mapping[str, Any]) -> bool:
            return _normalize(state[self._type.status_field]) in targets

        def is_failed(state: Mapping[str, Any]) -> Optional[str]:
            status = state[self._type.status_field]
            if _normalize(status) not in errors:
                return None
            fault = self._fault_message(state)
            return f"{status}: {fault}" if fault else str(status)

        waiter = Waiter(
            self._fetch,
            is_ready,
            is_failed,
            spec or self._session.config.wait,
            description=f"{self._describe()} to become {'/'.join(sorted(targets))}",
            **waiter_kwargs
        )
        outcome = waiter.wait()

        if isinstance(outcome, Ready):
            self._data = dict(outcome.value)
            return Ready(self)
        return outcome

    def wait_for_deletion(self, spec: Optional[WaitSpec] = None, **waiter_kwargs: Any) -> WaitOutcome:
        """
        Ждать, пока ресурс не исчезнет.

        404 при опросе - это успех: Failed(NOT_FOUND) превращается в Ready(None).
        Статус ошибки ресурса по-прежнему Failed.
        """
        errors = _status_set(self._type.error_statuses)
        status_field = self._type.status_field

        def is_failed(state: Mapping[str, Any]) -> Optional[str]:
            if status_field is None:
                return None
            status = state.get(status_field)
            if _normalize(status) not in errors:
                return None
            fault = self._fault_message(state)
            return f"{status}: {fault}" if fault else str(status)

        waiter = Waiter(
            self._fetch,
            lambda state: False,
            is_failed,
            spec or self._session.config.wait,
            description=f"{self._describe()} to be deleted",
            **waiter_kwargs
        )
        outcome = waiter.wait()

        if isinstance(outcome, Failed) and outcome.kind is ErrorKind.NOT_FOUND:
            return Ready(None)
        return outcome

    def _fault_message(self, state: Mapping[str, Any]) -> Optional[str]:
        if not self._type.fault_field:
            return None
        fault = state.get(self._type.fault_field)
        if isinstance(fault, Mapping):
            return fault.get("message")
        return fault


def _normalize(status: Any) -> str:
    return str(status).upper()


def _status_set(statuses: Sequence[str]) -> frozenset:
    return frozenset(_normalize(status) for status in statuses)


def _load(session: Session, resource_type: ResourceType, resource_id: Any) -> Mapping[str, Any]:
    data = session.get_json(
        resource_type.service_type,
        resource_type.path,
        resource_id,
        key=resource_type.resource_key
    )
    if not isinstance(data, Mapping):
        raise InvalidResponseError(f"{resource_type.name} {resource_id} is not an object")
    return data


def get_resource(session: Session, resource_type: ResourceType, id_or_name: str) -> Resource:
    """
    Найти ресурс по ID или имени.

    Сначала GET по ID; при 404 - поиск по имени, ровно один результат.

    Raises:
        NotFoundError: Нет ни по ID, ни по имени (или фильтр не поддерживается)
        TooManyItemsError: Несколько ресурсов с таким именем
    """
    try:
        return Resource(session, resource_type, _load(session, resource_type, id_or_name))
    except NotFoundError:
        if resource_type.name_filter is None:
            raise
        try:
            return (
                ResourceQuery(session, resource_type)
                .filter(**{resource_type.name_filter: id_or_name})
                .one()
            )
        except ResourceNotFoundError:
            raise NotFoundError(
                session.url_for(resource_type.service_type, resource_type.path, id_or_name),
                f"No {resource_type.name} with ID or name {id_or_name!r}"
            ) from None


def create_resource(session: Session, resource_type: ResourceType, fields: Mapping[str, Any]) -> Resource:
    """
    POST новый ресурс. Запрос принимается синхронно, завершение -
    через Resource.wait_for_status().
    """
    body: Any = dict(fields)
    if resource_type.resource_key:
        body = {resource_type.resource_key: body}

    data = session.post_json(
        resource_type.service_type,
        resource_type.path,
        body=body,
        key=resource_type.resource_key
    )
    return Resource(session, resource_type, data)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# QUERY
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ResourceQuery:
    """
    Query builder над list endpoint.

    Example:
        >>> servers = (cloud.find_servers()
        ...            .filter(status="ACTIVE")
        ...            .sort_by("created_at", "desc")
        ...            .with_limit(5)
        ...            .all())
    """

    def __init__(self, session: Session, resource_type: ResourceType, page_size: Optional[int] = None):
        self._session = session
        self._type = resource_type
        self._filters: Dict[str, Any] = {}
        self._sort: List[Tuple[str, str]] = []
        self._page_size = page_size if page_size is not None else session.config.page_size
        self._limit: Optional[int] = None

    def filter(self, **filters: Any) -> "ResourceQuery":
        """Добавить фильтры (передаются сервису как есть)."""
        self._filters.update(filters)
        return self

    def sort_by(self, key: str, direction: str = "asc") -> "ResourceQuery":
        if direction not in ("asc", "desc"):
            raise ValueError(f"sort direction must be 'asc' or 'desc', got {direction!r}")
        self._sort.append((key, direction))
        return self

    def with_page_size(self, page_size: int) -> "ResourceQuery":
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._page_size = page_size
        return self

    def with_limit(self, limit: int) -> "ResourceQuery":
        """Вернуть не больше limit ресурсов всего."""
        if limit <= 0:
            raise ValueError("limit must be positive")
        self._limit = limit
        return self

    @property
    def resource_type(self) -> ResourceType:
        return self._type

    @property
    def page_size(self) -> Optional[int]:
        if self._limit is not None and (self._page_size is None or self._limit < self._page_size):
            return self._limit
        return self._page_size

    def __iter__(self) -> PaginatedIterator[Resource]:
        return self.iterator()

    def iterator(self) -> PaginatedIterator[Resource]:
        """Новый ленивый итератор. Каждый вызов начинает с первой страницы."""
        # marker -> сколько элементов выдано до этой страницы
        seen_before: Dict[Any, int] = {None: 0}

        def list_page(marker: Optional[Any]) -> Page[Resource]:
            page = self._list_page(marker, seen_before[marker])
            if page.next_marker is not None:
                seen_before[page.next_marker] = seen_before[marker] + len(page.items)
            return page

        return PaginatedIterator(list_page, description=self._type.collection_key)

    def all(self) -> List[Resource]:
        """Все подходящие ресурсы (не больше with_limit)."""
        return self.iterator().collect(self._limit)

    def one(self) -> Resource:
        """
        Ровно один подходящий ресурс.

        Raises:
            ResourceNotFoundError: Ничего не найдено
            TooManyItemsError: Найдено больше одного
        """
        items = self.iterator().collect(2)
        if not items:
            raise ResourceNotFoundError(f"Query returned no {self._type.collection_key}")
        if len(items) > 1:
            raise TooManyItemsError(f"Query returned more than one {self._type.name}")
        return items[0]

    def _params(self, marker: Optional[Any]) -> List[Tuple[str, Any]]:
        params: List[Tuple[str, Any]] = list(self._filters.items())
        for key, direction in self._sort:
            params.append(("sort_key", key))
            params.append(("sort_dir", direction))
        if self._type.paginated:
            if self.page_size is not None:
                params.append(("limit", self.page_size))
            if marker is not None:
                params.append(("marker", marker))
        return params

    def _list_page(self, marker: Optional[Any], seen: int) -> Page[Resource]:
        body = self._session.get_json(
            self._type.service_type,
            self._type.list_path or self._type.path,
            params=self._params(marker),
        )
        if not isinstance(body, Mapping) or self._type.collection_key not in body:
            raise InvalidResponseError(f"List response has no '{self._type.collection_key}'")

        raw_items = body[self._type.collection_key]
        if self._type.item_key:
            raw_items = [item[self._type.item_key] for item in raw_items]
        items = [Resource(self._session, self._type, item) for item in raw_items]

        return Page(items=items, next_marker=self._next_marker(body, items, seen))

    def _next_marker(self, body: Mapping[str, Any], items: List[Resource], seen: int) -> Optional[Any]:
        """
        Marker следующей страницы: ID последнего элемента, если сервис
        сообщил о продолжении (ссылка next) или страница заполнена целиком.

        Сервис может вернуть меньше запрошенного limit (свой max_limit),
        поэтому with_limit считается по всем выданным элементам, а не
        по размеру страницы.
        """
        if not self._type.paginated or not items:
            return None

        has_next_link = bool(body.get("next")) or any(
            link.get("rel") == "next" for link in body.get(self._type.links_key) or ()
        )
        page_full = self.page_size is not None and len(items) >= self.page_size
        if not (has_next_link or page_full):
            return None

        # with_limit уже набран - дальше не идём
        if self._limit is not None and seen + len(items) >= self._limit:
            return None

        return items[-1].id
