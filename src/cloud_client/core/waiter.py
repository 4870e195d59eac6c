"""
Waiter - ожидание eventual-consistency операций.

Опрашивает один ресурс, пока он не станет готовым, не перейдёт
в состояние ошибки или не истечёт дедлайн.

Включает:
- Три независимых предиката: готов / ошибка / ещё в процессе
- Глобальный (на вызов wait) лимит временных ошибок
- Фиксированную или экспоненциальную задержку между опросами
- Дедлайн на всё ожидание, а не на отдельный опрос
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from .config import WaitSpec
from .error_classifier import classify
from .exceptions import (
    CloudClientException,
    ErrorKind,
    ResourceFailedError,
    WaitTimeoutError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

PollFn = Callable[[], T]
ReadyPredicate = Callable[[T], bool]
FailedPredicate = Callable[[T], Optional[str]]

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# OUTCOMES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class Ready(Generic[T]):
    """Предикат готовности выполнен."""
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failed:
    """
    Ресурс в состоянии ошибки или ошибка опроса.

    Attributes:
        kind: Классификация
        context: Статус ресурса или текст последней ошибки
        error: Исключение последнего опроса (если было)
    """
    kind: ErrorKind
    context: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Поднять исключение: исходную ошибку опроса или ResourceFailedError."""
        if isinstance(self.error, CloudClientException):
            raise self.error
        raise ResourceFailedError(self.kind, self.context) from self.error


@dataclass(frozen=True)
class TimedOut:
    """Дедлайн истёк, пока ресурс был в процессе."""
    elapsed: float
    polls: int

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise WaitTimeoutError(self.elapsed, self.polls)


WaitOutcome = Union[Ready[T], Failed, TimedOut]

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# WAITER
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Waiter(Generic[T]):
    """
    Механизм ожидания состояния ресурса.

    Опросы строго последовательны, фоновых потоков нет. Единственная
    точка приостановки - sleep между опросами.

    Args:
        poll_fn: Один запрос статуса; возвращает состояние или бросает исключение
        is_ready: Предикат готовности
        is_failed: Возвращает описание ошибки (str) или None
        spec: Параметры ожидания (по умолчанию WaitSpec())
        description: Что ожидаем (для логов)
        sleep: Функция сна (подменяется в тестах)
        clock: Монотонные часы (подменяются в тестах)

    Examples:
        >>> waiter = Waiter(
        ...     poll_fn=lambda: session.get_json("compute", "servers", server_id)["server"],
        ...     is_ready=lambda s: s["status"] == "ACTIVE",
        ...     is_failed=lambda s: s.get("fault", {}).get("message") if s["status"] == "ERROR" else None,
        ...     spec=WaitSpec(poll_interval=2, timeout=600),
        ... )
        >>> outcome = waiter.wait()
        >>> server = outcome.unwrap()
    """

    def __init__(
        self,
        poll_fn: PollFn,
        is_ready: ReadyPredicate,
        is_failed: Optional[FailedPredicate] = None,
        spec: Optional[WaitSpec] = None,
        *,
        description: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._poll_fn = poll_fn
        self._is_ready = is_ready
        self._is_failed = is_failed
        self._spec = spec or WaitSpec()
        self._description = description or "resource"
        self._sleep = sleep
        self._clock = clock

        self._polls = 0
        self._sleeps = 0
        self._transient_count = 0

    @property
    def spec(self) -> WaitSpec:
        return self._spec

    @property
    def polls(self) -> int:
        """Сколько раз вызывался poll_fn в последнем wait()."""
        return self._polls

    @property
    def sleeps(self) -> int:
        """Сколько было пауз между опросами в последнем wait()."""
        return self._sleeps

    @property
    def transient_count(self) -> int:
        """Сколько временных ошибок было поглощено в последнем wait()."""
        return self._transient_count

    def wait(self) -> WaitOutcome:
        """
        Ждать терминального исхода.

        Никогда не бросает исключения из poll_fn наружу: любая ошибка
        классифицируется и превращается в Failed.

        Returns:
            Ready(state), Failed(kind, context) или TimedOut
        """
        spec = self._spec
        self._polls = 0
        self._sleeps = 0
        self._transient_count = 0

        start = self._clock()

        while True:
            self._polls += 1
            outcome = self._poll_once()
            if outcome is not None:
                return outcome

            # Перед повтором: дедлайн
            elapsed = self._clock() - start
            if spec.timeout is not None and elapsed >= spec.timeout:
                return self._timed_out(elapsed)

            delay = spec.delay_for(self._polls - 1)
            if spec.timeout is not None:
                delay = min(delay, spec.timeout - elapsed)

            logger.debug(
                "Waiting %.2fs before next poll of %s (poll %d)",
                delay, self._description, self._polls
            )
            self._sleep(delay)
            self._sleeps += 1

            # Опрос не должен стартовать позже дедлайна
            elapsed = self._clock() - start
            if spec.timeout is not None and elapsed > spec.timeout:
                return self._timed_out(elapsed)

    def _poll_once(self) -> Optional[WaitOutcome]:
        """Один опрос. None - ресурс ещё в процессе (или поглощённая временная ошибка)."""
        try:
            state = self._poll_fn()
        except Exception as exc:
            return self._handle_error(exc)

        try:
            ready = self._is_ready(state)
            context = None
            if not ready and self._is_failed is not None:
                context = self._is_failed(state)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            # Неожиданная схема состояния
            logger.warning(
                "Cannot evaluate state of %s: %r", self._description, exc
            )
            return Failed(ErrorKind.FATAL, f"Unexpected state: {exc!r}", exc)

        if ready:
            logger.info(
                "%s is ready after %d poll(s)", self._description, self._polls
            )
            return Ready(state)

        if context is not None:
            # Состояние ошибки сообщает сам ресурс - не ретраим
            logger.warning(
                "%s entered an error state: %s", self._description, context
            )
            return Failed(ErrorKind.FATAL, str(context))

        logger.debug("%s is still pending (poll %d)", self._description, self._polls)
        return None

    def _handle_error(self, exc: Exception) -> Optional[WaitOutcome]:
        kind = classify(exc)

        if kind is ErrorKind.TRANSIENT:
            if self._transient_count < self._spec.max_transient_retries:
                self._transient_count += 1
                logger.warning(
                    "Transient error polling %s (%d/%d): %s",
                    self._description,
                    self._transient_count,
                    self._spec.max_transient_retries,
                    exc
                )
                return None

            logger.warning(
                "Transient retries exhausted polling %s after %d poll(s): %s",
                self._description, self._polls, exc
            )
            return Failed(kind, str(exc), exc)

        logger.warning(
            "Polling %s failed with %s error: %s", self._description, kind.value, exc
        )
        return Failed(kind, str(exc), exc)

    def _timed_out(self, elapsed: float) -> TimedOut:
        logger.warning(
            "Timed out waiting for %s after %.1fs (%d poll(s))",
            self._description, elapsed, self._polls
        )
        return TimedOut(elapsed=elapsed, polls=self._polls)


def wait(
    poll_fn: PollFn,
    is_ready: ReadyPredicate,
    is_failed: Optional[FailedPredicate] = None,
    spec: Optional[WaitSpec] = None,
    **kwargs: Any
) -> WaitOutcome:
    """
    Shortcut: Waiter(...).wait().

    Examples:
        >>> outcome = wait(fetch_volume, lambda v: v["status"] == "available",
        ...                spec=WaitSpec(poll_interval=1, timeout=120))
    """
    return Waiter(poll_fn, is_ready, is_failed, spec, **kwargs).wait()
