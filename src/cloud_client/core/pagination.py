"""
Пагинация - потоковое чтение list endpoints.

Превращает list endpoint с пагинацией через marker в одну ленивую
последовательность элементов.

Включает:
- Буфер ровно одной страницы
- Загрузку следующей страницы только по запросу потребителя
- Типизированные ошибки (с kind) без сдвига курсора: повторный
  next() повторяет загрузку той же страницы
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, Iterator, List, Optional, Sequence, TypeVar

from .error_classifier import to_exception
from .exceptions import CloudClientException, InvalidResponseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ListPageFn = Callable[[Optional[Any]], "Page[T]"]

_END = object()


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    Одна загруженная страница.

    Attributes:
        items: Элементы страницы в порядке сервиса (может быть пусто)
        next_marker: Непрозрачный marker продолжения, None на последней странице

    Example:
        >>> Page(items=[{"id": "a"}, {"id": "b"}], next_marker="b")
    """

    items: Sequence[T] = field(default_factory=tuple)
    next_marker: Optional[Any] = None

    def __post_init__(self):
        object.__setattr__(self, 'items', tuple(self.items))

    @property
    def is_last(self) -> bool:
        """True, если следующей страницы нет."""
        return self.next_marker is None


@dataclass
class PageCursor(Generic[T]):
    """Состояние итерации. Принадлежит ровно одному PaginatedIterator."""

    current_page: Optional[Page[T]] = None
    position_in_page: int = 0
    exhausted: bool = False

    @property
    def has_buffered(self) -> bool:
        return (
            self.current_page is not None
            and self.position_in_page < len(self.current_page.items)
        )


class IteratorState(Enum):
    """Состояния PaginatedIterator."""
    CREATED = "created"
    FETCHING = "fetching"
    BUFFERED = "buffered"
    EXHAUSTED = "exhausted"


class PaginatedIterator(Iterator[T]):
    """
    Ленивый итератор по list endpoint с пагинацией через marker.

    Переходы:
        CREATED -> FETCHING(first page) -> BUFFERED
        BUFFERED -> FETCHING(next page) -> BUFFERED
        BUFFERED -> EXHAUSTED (конечное, больше запросов нет)

    Args:
        list_page: Загрузка одной страницы по marker (None - первая
            страница). При ошибке бросает исключение.
        description: Что перечисляется (для логов и ошибок)

    Example:
        >>> servers = PaginatedIterator(lambda marker: fetch_servers(marker))
        >>> for server in servers:
        ...     print(server["id"])

    Не потокобезопасен: один итератор - один потребитель.
    """

    def __init__(self, list_page: ListPageFn, description: Optional[str] = None):
        self._list_page = list_page
        self._description = description or "items"
        self._cursor: PageCursor[T] = PageCursor()
        self._fetching = False
        self._pages_fetched = 0

    def __iter__(self) -> "PaginatedIterator[T]":
        return self

    def __next__(self) -> T:
        item = self._advance()
        if item is _END:
            raise StopIteration
        return item

    def fetch_next(self) -> Optional[T]:
        """
        Следующий элемент.

        Returns:
            Элемент или None в конце последовательности

        Raises:
            CloudClientException: Страница не загрузилась; ``kind`` говорит,
                поможет ли повтор. Курсор не сдвигается, следующий вызов
                повторяет ту же страницу.
        """
        item = self._advance()
        return None if item is _END else item

    @property
    def state(self) -> IteratorState:
        if self._fetching:
            return IteratorState.FETCHING
        if self._cursor.exhausted and not self._cursor.has_buffered:
            return IteratorState.EXHAUSTED
        if self._cursor.current_page is None:
            return IteratorState.CREATED
        return IteratorState.BUFFERED

    @property
    def pages_fetched(self) -> int:
        """Сколько страниц успешно загружено."""
        return self._pages_fetched

    @property
    def cursor(self) -> PageCursor[T]:
        return self._cursor

    def _advance(self) -> Any:
        cursor = self._cursor

        while True:
            if cursor.has_buffered:
                item = cursor.current_page.items[cursor.position_in_page]
                cursor.position_in_page += 1
                return item

            if cursor.exhausted:
                return _END

            if cursor.current_page is None:
                marker = None
            elif cursor.current_page.next_marker is None:
                cursor.exhausted = True
                return _END
            else:
                marker = cursor.current_page.next_marker

            page = self._fetch(marker)

            # Страница применяется целиком только после успешной загрузки
            cursor.current_page = page
            cursor.position_in_page = 0
            if page.next_marker is None:
                cursor.exhausted = True

    def _fetch(self, marker: Optional[Any]) -> Page[T]:
        logger.debug("Fetching %s page (marker=%r)", self._description, marker)

        self._fetching = True
        try:
            page = self._list_page(marker)
        except CloudClientException as exc:
            logger.warning(
                "Fetching %s page failed (%s): %s", self._description, exc.kind.value, exc
            )
            raise
        except Exception as exc:
            error = to_exception(exc)
            logger.warning(
                "Fetching %s page failed (%s): %s", self._description, error.kind.value, exc
            )
            raise error from exc
        finally:
            self._fetching = False

        if not isinstance(page, Page):
            raise InvalidResponseError(
                f"list_page for {self._description} returned "
                f"{type(page).__name__}, expected Page"
            )

        if marker is not None and page.next_marker == marker:
            raise InvalidResponseError(
                f"Service repeated marker {marker!r} while listing {self._description}"
            )

        self._pages_fetched += 1
        logger.debug(
            "Fetched %s page %d: %d item(s), last=%s",
            self._description, self._pages_fetched, len(page.items), page.is_last
        )
        return page

    def collect(self, limit: Optional[int] = None) -> List[T]:
        """
        Собрать элементы в список.

        Args:
            limit: Остановиться после limit элементов (лишняя страница не загружается)
        """
        result: List[T] = []
        while limit is None or len(result) < limit:
            item = self._advance()
            if item is _END:
                break
            result.append(item)
        return result
