# src/infra/dispatcher.py
"""
Диспетчер RPC-вызовов за предохранителями.

Каждый вызов идёт через предохранитель своего сервиса:
открытая цепь отклоняет вызов сразу, таймаут и ошибки учитываются
в статистике, при наличии fallback вместо ошибки возвращается его результат.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any, Callable, Protocol

from src.common.errors import CircuitOpenError, CircuitTimeoutError, RpcError
from src.common.logger import log_debug, log_error, log_warning
from src.infra.circuit_breaker import BreakerRegistry, CircuitBreaker, error_status
from src.shared.models.common import BreakerMetricsResponse


class RpcTransport(Protocol):
    """Клиент, умеющий отправить запрос (pattern, data) и дождаться ответа."""

    async def send(self, pattern: str, data: Any) -> Any: ...


Fallback = Callable[[RpcError], Any]


def normalize_error(exc: BaseException, pattern: str | None = None, data: Any = None) -> RpcError:
    """
    Приводит любую ошибку вызова к RpcError.
    Сохраняет message, code и статус, добавляет контекст вызова.
    """
    if isinstance(exc, RpcError):
        if exc.pattern is None and pattern is not None:
            exc.pattern = pattern
            exc.data = data
        return exc

    code = getattr(exc, "code", None)
    normalized = RpcError(
        str(exc) or type(exc).__name__,
        code=code if isinstance(code, str) else None,
        status=error_status(exc),
        pattern=pattern,
        data=data,
    )
    normalized.__cause__ = exc
    return normalized


class CircuitBreakerDispatcher:
    """Отправка запросов сервисам через их предохранители."""

    def __init__(self, registry: BreakerRegistry | None = None) -> None:
        self.registry = registry or BreakerRegistry()

    async def send_request(
        self,
        client: RpcTransport,
        service_id: str,
        pattern: str,
        data: Any,
        fallback: Fallback | None = None,
        timeout_ms: int | None = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        """
        Выполняет вызов через предохранитель service_id.

        Args:
            client: RPC-клиент сервиса
            service_id: Имя сервиса (ключ предохранителя)
            pattern: Шаблон сообщения
            data: Тело запроса
            fallback: Функция (обычная или async), получающая нормализованную ошибку
            timeout_ms: Таймаут вызова, по умолчанию из параметров предохранителя
            options: Переопределения параметров при создании предохранителя

        Raises:
            RpcError: Вызов не удался и fallback не задан
        """
        breaker = self.registry.get_breaker(service_id, options)

        if not breaker.allow_request():
            breaker.record_reject()
            error = CircuitOpenError(service_id, pattern=pattern, data=data)
            return await self._fail(breaker, error, fallback)

        timeout = timeout_ms if timeout_ms is not None else breaker.options.timeout_ms
        started = time.monotonic()

        try:
            result = await asyncio.wait_for(client.send(pattern, data), timeout / 1000)
        except asyncio.TimeoutError:
            error = CircuitTimeoutError(service_id, timeout, pattern=pattern, data=data)
            breaker.record_timeout(breaker.is_counted(error))
            await log_error(f"⏱️ Timeout for {service_id}: {error.message}")
            return await self._fail(breaker, error, fallback)
        except asyncio.CancelledError:
            breaker.release_trial()
            raise
        except Exception as e:
            error = normalize_error(e, pattern, data)
            latency = int((time.monotonic() - started) * 1000)
            breaker.record_failure(breaker.is_counted(error))
            await log_error(
                f"❌ Failure for {service_id} ({latency}ms): {error.message}",
                extra={"pattern": pattern, "status": error.status},
            )
            return await self._fail(breaker, error, fallback)

        breaker.record_success()
        latency = int((time.monotonic() - started) * 1000)
        await log_debug(f"✅ Success for {service_id} ({latency}ms)")
        return result

    async def _fail(self, breaker: CircuitBreaker, error: RpcError, fallback: Fallback | None) -> Any:
        if fallback is None:
            raise error

        breaker.record_fallback()
        await log_warning(f"⚠️ Fallback executed for {breaker.name}: {error.message}")
        result = fallback(error)
        if inspect.isawaitable(result):
            result = await result
        return result

    # =========================================================================
    # АДМИНИСТРИРОВАНИЕ
    # =========================================================================

    def get_status(self) -> dict[str, dict[str, Any]]:
        """Состояние и счётчики всех предохранителей."""
        return {service_id: breaker.get_stats() for service_id, breaker in self.registry.items()}

    def get_all_metrics(self) -> BreakerMetricsResponse:
        return BreakerMetricsResponse(breakers=self.get_status())

    def reset_breaker(self, service_id: str) -> bool:
        """Принудительно замыкает цепь. False, если предохранителя нет."""
        breaker = self.registry.find(service_id)
        if breaker is None:
            return False
        breaker.force_close()
        return True

    def open_breaker(self, service_id: str) -> bool:
        """Принудительно размыкает цепь. False, если предохранителя нет."""
        breaker = self.registry.find(service_id)
        if breaker is None:
            return False
        breaker.force_open()
        return True


# Глобальный экземпляр
_dispatcher: CircuitBreakerDispatcher | None = None


def get_dispatcher() -> CircuitBreakerDispatcher:
    """Возвращает диспетчер процесса."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = CircuitBreakerDispatcher()
    return _dispatcher
