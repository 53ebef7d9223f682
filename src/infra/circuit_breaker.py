# src/infra/circuit_breaker.py
"""
Предохранитель (circuit breaker) для синхронных вызовов между сервисами.

Автомат CLOSED -> OPEN -> HALF_OPEN -> CLOSED.
Статистика ведётся в скользящем окне из нескольких корзин,
решение об открытии принимается по доле учитываемых ошибок.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable

from src.common.logger import get_logger
from src.common.metrics import get_metrics

logger = get_logger("circuit_breaker")


Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class CircuitState(str, Enum):
    """Состояние предохранителя."""
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF-OPEN"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# ПАРАМЕТРЫ
# =============================================================================

@dataclass(frozen=True)
class CircuitBreakerOptions:
    """
    Пороговые значения предохранителя.

    Attributes:
        timeout_ms: Таймаут одного вызова
        reset_timeout_ms: Через сколько OPEN пропускает пробный вызов
        error_threshold_percentage: Доля ошибок для открытия
        rolling_count_timeout_ms: Длина скользящего окна
        rolling_count_buckets: Число корзин в окне
        volume_threshold: Минимум запросов в окне для открытия
        allow_warm_up: Не открываться, пока не прошло первое окно
        count_all_errors: Учитывать все ошибки, а не только 4xx
    """
    timeout_ms: int = 5000
    reset_timeout_ms: int = 10000
    error_threshold_percentage: float = 70
    rolling_count_timeout_ms: int = 10000
    rolling_count_buckets: int = 10
    volume_threshold: int = 20
    allow_warm_up: bool = True
    count_all_errors: bool = False

    @classmethod
    def from_settings(cls) -> CircuitBreakerOptions:
        from src.config import settings
        cb = settings.circuit_breaker
        return cls(
            timeout_ms=cb.CIRCUIT_BREAKER_TIMEOUT_MS,
            reset_timeout_ms=cb.CIRCUIT_BREAKER_RESET_TIMEOUT_MS,
            error_threshold_percentage=cb.CIRCUIT_BREAKER_ERROR_THRESHOLD_PERCENT,
            rolling_count_timeout_ms=cb.CIRCUIT_BREAKER_ROLLING_WINDOW_MS,
            rolling_count_buckets=cb.CIRCUIT_BREAKER_ROLLING_BUCKETS,
            volume_threshold=cb.CIRCUIT_BREAKER_VOLUME_THRESHOLD,
            allow_warm_up=cb.CIRCUIT_BREAKER_ALLOW_WARM_UP,
            count_all_errors=cb.CIRCUIT_BREAKER_COUNT_ALL_ERRORS,
        )

    def merge(self, overrides: dict[str, Any] | None) -> CircuitBreakerOptions:
        """Накладывает переопределения вызывающего поверх значений по умолчанию."""
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Неизвестные параметры предохранителя: {sorted(unknown)}")
        return replace(self, **overrides)


def error_status(error: BaseException) -> int | None:
    """HTTP-подобный статус ошибки (status, status_code или statusCode)."""
    for attr in ("status", "status_code", "statusCode"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def default_error_filter(error: BaseException) -> bool:
    """В статистику идут только ошибки со статусом 4xx."""
    status = error_status(error)
    return status is not None and 400 <= status < 500


# =============================================================================
# СКОЛЬЗЯЩЕЕ ОКНО
# =============================================================================

@dataclass
class Bucket:
    """Счётчики одной корзины окна."""
    successes: int = 0
    failures: int = 0
    timeouts: int = 0
    rejects: int = 0
    fallbacks: int = 0


class RollingWindow:
    """Окно из buckets корзин общей длиной window_ms."""

    def __init__(self, window_ms: int, buckets: int, clock: Clock) -> None:
        self._bucket_ms = max(window_ms / max(buckets, 1), 1.0)
        self._buckets = max(buckets, 1)
        self._clock = clock
        self._window: deque[tuple[int, Bucket]] = deque()

    def current(self) -> Bucket:
        index = int(self._clock() // self._bucket_ms)
        self._expire(index)
        if not self._window or self._window[-1][0] != index:
            self._window.append((index, Bucket()))
        return self._window[-1][1]

    def _expire(self, index: int) -> None:
        while self._window and self._window[0][0] <= index - self._buckets:
            self._window.popleft()

    def totals(self) -> Bucket:
        self._expire(int(self._clock() // self._bucket_ms))
        total = Bucket()
        for _, bucket in self._window:
            for f in fields(Bucket):
                setattr(total, f.name, getattr(total, f.name) + getattr(bucket, f.name))
        return total

    def clear(self) -> None:
        self._window.clear()


# =============================================================================
# ПРЕДОХРАНИТЕЛЬ
# =============================================================================

class CircuitBreaker:
    """
    Предохранитель одного сервиса.

    Счётчики меняются под threading.Lock, поэтому экземпляр
    можно разделять между потоками.
    """

    def __init__(
        self,
        name: str,
        options: CircuitBreakerOptions | None = None,
        clock: Clock = monotonic_ms,
        error_filter: Callable[[BaseException], bool] | None = None,
    ) -> None:
        self.name = name
        self.options = options or CircuitBreakerOptions()
        self._clock = clock
        self._error_filter = error_filter
        self._lock = threading.Lock()

        self._state = CircuitState.CLOSED
        self._opened_at = 0.0
        self._created_at = clock()
        self._trial_in_flight = False
        self._window = RollingWindow(
            self.options.rolling_count_timeout_ms,
            self.options.rolling_count_buckets,
            clock,
        )
        get_metrics().set_breaker_state(name, self._state.value)

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state

    def is_counted(self, error: BaseException) -> bool:
        """Идёт ли ошибка в статистику открытия."""
        if self._error_filter is not None:
            return self._error_filter(error)
        if self.options.count_all_errors:
            return True
        return default_error_filter(error)

    # -------------------------------------------------------------------------
    # Переходы
    # -------------------------------------------------------------------------

    def _transition(self, state: CircuitState) -> None:
        """Вызывается под self._lock."""
        if self._state is state:
            return
        self._state = state
        metrics = get_metrics()
        metrics.set_breaker_state(self.name, state.value)

        if state is CircuitState.OPEN:
            self._opened_at = self._clock()
            self._trial_in_flight = False
            metrics.circuit_breaker_events_total.labels(service=self.name, event="open").inc()
            logger.warning(f"🔴 Circuit OPEN for service: {self.name}")
        elif state is CircuitState.CLOSED:
            self._trial_in_flight = False
            self._window.clear()
            metrics.circuit_breaker_events_total.labels(service=self.name, event="close").inc()
            logger.info(f"🟢 Circuit CLOSED for service: {self.name}")
        else:
            metrics.circuit_breaker_events_total.labels(service=self.name, event="half_open").inc()
            logger.info(f"🟡 Circuit HALF-OPEN for service: {self.name}")

    def _warming_up(self) -> bool:
        return (
            self.options.allow_warm_up
            and self._clock() - self._created_at < self.options.rolling_count_timeout_ms
        )

    def _should_open(self) -> bool:
        totals = self._window.totals()
        requests = totals.successes + totals.failures
        if requests < self.options.volume_threshold or requests == 0:
            return False
        if self._warming_up():
            return False
        percentage = totals.failures / requests * 100
        return percentage >= self.options.error_threshold_percentage

    def allow_request(self) -> bool:
        """
        Можно ли выполнить вызов.
        OPEN по истечении reset_timeout переходит в HALF_OPEN и пропускает один пробный вызов.
        """
        with self._lock:
            if self._state is CircuitState.CLOSED:
                return True
            if self._state is CircuitState.OPEN:
                if self._clock() - self._opened_at < self.options.reset_timeout_ms:
                    return False
                self._transition(CircuitState.HALF_OPEN)
            if self._trial_in_flight:
                return False
            self._trial_in_flight = True
            return True

    # -------------------------------------------------------------------------
    # Учёт результатов
    # -------------------------------------------------------------------------

    def record_success(self) -> None:
        with self._lock:
            self._window.current().successes += 1
            if self._state is CircuitState.HALF_OPEN:
                self._transition(CircuitState.CLOSED)

    def record_failure(self, counted: bool) -> None:
        """
        Учитывает неудачный вызов.
        Неучитываемая ошибка не влияет на долю ошибок,
        но проваленный пробный вызов всё равно снова открывает цепь.
        """
        with self._lock:
            if counted:
                self._window.current().failures += 1
            if self._state is CircuitState.HALF_OPEN:
                self._transition(CircuitState.OPEN)
            elif self._state is CircuitState.CLOSED and counted and self._should_open():
                self._transition(CircuitState.OPEN)

    def record_timeout(self, counted: bool) -> None:
        with self._lock:
            self._window.current().timeouts += 1
        get_metrics().circuit_breaker_events_total.labels(service=self.name, event="timeout").inc()
        self.record_failure(counted)

    def release_trial(self) -> None:
        """Снимает отметку пробного вызова, если он был отменён без результата."""
        with self._lock:
            self._trial_in_flight = False

    def record_reject(self) -> None:
        with self._lock:
            self._window.current().rejects += 1
        get_metrics().circuit_breaker_events_total.labels(service=self.name, event="reject").inc()

    def record_fallback(self) -> None:
        with self._lock:
            self._window.current().fallbacks += 1
        get_metrics().circuit_breaker_events_total.labels(service=self.name, event="fallback").inc()

    # -------------------------------------------------------------------------
    # Администрирование
    # -------------------------------------------------------------------------

    def force_open(self) -> None:
        with self._lock:
            if self._state is CircuitState.OPEN:
                self._opened_at = self._clock()
            self._transition(CircuitState.OPEN)

    def force_close(self) -> None:
        with self._lock:
            self._transition(CircuitState.CLOSED)

    def get_stats(self) -> dict[str, Any]:
        """Состояние и счётчики текущего окна."""
        with self._lock:
            totals = self._window.totals()
            requests = totals.failures + totals.successes
            percentage = totals.failures / requests * 100 if requests else 0
            return {
                "state": self._state.value,
                "failures": totals.failures,
                "successes": totals.successes,
                "rejects": totals.rejects,
                "timeouts": totals.timeouts,
                "fallbacks": totals.fallbacks,
                "errorPercentage": round(percentage, 2),
            }


# =============================================================================
# РЕЕСТР
# =============================================================================

class BreakerRegistry:
    """
    Реестр предохранителей процесса.
    Предохранитель создаётся при первом обращении и живёт до конца процесса.
    """

    def __init__(
        self,
        defaults: CircuitBreakerOptions | None = None,
        clock: Clock = monotonic_ms,
    ) -> None:
        self._defaults = defaults
        self._clock = clock
        self._lock = threading.Lock()
        self._breakers: dict[str, CircuitBreaker] = {}

    @property
    def defaults(self) -> CircuitBreakerOptions:
        if self._defaults is None:
            self._defaults = CircuitBreakerOptions.from_settings()
        return self._defaults

    def get_breaker(
        self,
        service_id: str,
        options: dict[str, Any] | None = None,
    ) -> CircuitBreaker:
        """
        Возвращает предохранитель сервиса, создавая его при первом вызове.
        Переопределения применяются только при создании.
        """
        with self._lock:
            breaker = self._breakers.get(service_id)
            if breaker is None:
                breaker = CircuitBreaker(
                    service_id,
                    self.defaults.merge(options),
                    clock=self._clock,
                )
                self._breakers[service_id] = breaker
            return breaker

    def find(self, service_id: str) -> CircuitBreaker | None:
        with self._lock:
            return self._breakers.get(service_id)

    def items(self) -> list[tuple[str, CircuitBreaker]]:
        with self._lock:
            return list(self._breakers.items())
