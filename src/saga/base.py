# src/saga/base.py
"""
Базовый класс обработчиков событий саги.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextvars import ContextVar
from typing import Any, Awaitable, Callable, TypeVar

from src.common.constants import TypeMsg
from src.common.errors import DeadLetterError, HandlerRetriesExhausted
from src.common.logger import log_error, log_info
from src.common.metrics import get_metrics
from src.common.retry import RetryPolicy
from src.infra.event_bus import EventBus, get_event_bus
from src.infra.redis_client import ProcessedEventStore
from src.shared.events.base import EventEnvelope
from src.shared.events.codec import decode_event


EventHandler = Callable[[EventEnvelope], Awaitable[None]]

T = TypeVar("T")

# Шаги, выполненные в текущем dispatch()
_completed_steps: ContextVar[set[str] | None] = ContextVar("completed_steps", default=None)


def saga_retry_policy() -> RetryPolicy:
    """Политика повторов обработчиков из конфигурации."""
    from src.config import settings
    saga = settings.saga
    return RetryPolicy(
        max_attempts=saga.SAGA_RETRY_ATTEMPTS,
        base_delay=saga.SAGA_RETRY_BASE_DELAY,
        max_delay=saga.SAGA_RETRY_MAX_DELAY,
        jitter=saga.SAGA_RETRY_JITTER,
        give_up_on=(DeadLetterError,),
    )


class BaseEventHandler(ABC):
    """
    Обработчик событий одного сервиса.

    Подписывается на свои топики при start(), каждое сообщение:
    декодирует, пропускает повторную доставку (если включена дедупликация),
    выполняет обработчик с повторами и отмечает событие обработанным.
    """

    def __init__(
        self,
        event_bus: EventBus | None = None,
        retry_policy: RetryPolicy | None = None,
        dedup_store: ProcessedEventStore | None = None,
    ) -> None:
        """
        Args:
            event_bus: Шина событий
            retry_policy: Политика повторов обработчика
            dedup_store: Хранилище обработанных событий (None - без дедупликации)
        """
        self.event_bus = event_bus or get_event_bus()
        self.retry_policy = retry_policy or saga_retry_policy()
        self.dedup_store = dedup_store
        self._started = False

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Имя сервиса (префикс очередей)."""

    @property
    @abstractmethod
    def handlers(self) -> dict[str, EventHandler]:
        """Обработчики по имени события."""

    @property
    def started(self) -> bool:
        return self._started

    async def close(self) -> None:
        """Освобождает ресурсы обработчика."""

    async def start(self) -> None:
        """Подписывается на все топики. Повторный вызов ничего не делает."""
        if self._started:
            return
        self._started = True

        await log_info(f"{self.service_name}: подписка на события...", type_msg=TypeMsg.INFO)
        try:
            for topic in self.handlers:
                await self.event_bus.subscribe(topic, self.service_name, self._make_dispatch(topic))
        except Exception:
            self._started = False
            raise

        await log_info(
            f"{self.service_name}: подписка оформлена ({', '.join(self.handlers)})",
            type_msg=TypeMsg.INFO,
        )

    def _make_dispatch(self, topic: str) -> Callable[[bytes], Awaitable[None]]:
        async def dispatch(body: bytes) -> None:
            await self.dispatch(topic, body)
        return dispatch

    async def dispatch(self, topic: str, body: bytes | str | dict) -> None:
        """
        Обрабатывает одну доставку.

        С хранилищем отметок событие сначала захватывается (SET NX),
        конкурентная доставка того же события пропускается.

        Raises:
            EnvelopeValidationError, UnknownEventError: сообщение не декодируется
            HandlerRetriesExhausted: обработчик не справился за все попытки
        """
        envelope = decode_event(body, expected_event=topic)
        handler = self.handlers[envelope.event_name]
        metrics = get_metrics()
        extra = {
            "event_id": envelope.id,
            "event_name": envelope.event_name,
            "service": self.service_name,
            "correlation_id": envelope.correlation_id,
        }

        if self.dedup_store is not None and not await self._claim(envelope):
            metrics.saga_duplicate_events_total.labels(
                service=self.service_name, event_name=envelope.event_name,
            ).inc()
            await log_info(
                f"Повторная доставка {envelope.event_name} пропущена",
                type_msg=TypeMsg.DEBUG,
                extra=extra,
            )
            return

        async def on_retry(attempt: int, error: Exception) -> None:
            metrics.saga_handler_retries_total.labels(
                service=self.service_name, event_name=envelope.event_name,
            ).inc()
            await log_info(
                f"Обработчик {envelope.event_name} упал (попытка {attempt}/{self.retry_policy.max_attempts}): {error}",
                type_msg=TypeMsg.WARNING,
                extra=extra,
            )

        token = _completed_steps.set(set())
        try:
            await self.retry_policy.run(handler, envelope, on_retry=on_retry)
        except DeadLetterError:
            await self._release(envelope)
            raise
        except Exception as e:
            await self._release(envelope)
            metrics.saga_handler_failures_total.labels(
                service=self.service_name, event_name=envelope.event_name,
            ).inc()
            await log_error(
                f"Обработчик {envelope.event_name} не справился после "
                f"{self.retry_policy.max_attempts} попыток: {e}",
                extra=extra,
                exc_info=True,
            )
            raise HandlerRetriesExhausted(
                self.service_name, envelope.event_name, envelope.id, self.retry_policy.max_attempts,
            ) from e
        finally:
            _completed_steps.reset(token)

        if self.dedup_store is not None:
            await self.dedup_store.mark_processed(self.service_name, envelope.id)
            await self.dedup_store.release(self.service_name, envelope.id)

    async def _claim(self, envelope: EventEnvelope) -> bool:
        """Захватывает событие. False, если оно уже обработано или обрабатывается."""
        if await self.dedup_store.is_processed(self.service_name, envelope.id):
            return False
        return await self.dedup_store.claim(self.service_name, envelope.id)

    async def _release(self, envelope: EventEnvelope) -> None:
        if self.dedup_store is not None:
            await self.dedup_store.release(self.service_name, envelope.id)

    # =========================================================================
    # ШАГИ ОБРАБОТЧИКА
    # =========================================================================

    async def run_step(
        self,
        envelope: EventEnvelope,
        step: str,
        func: Callable[..., Awaitable[T]],
        *args: Any,
    ) -> T | None:
        """
        Выполняет шаг обработчика не более одного раза на событие.

        Завершённые шаги запоминаются на время dispatch() и (если есть хранилище)
        в отметках с ключом {event_id}:{step}, поэтому повтор обработчика
        или повторная доставка после dead-letter продолжают с упавшего шага.

        Returns:
            Результат func или None, если шаг уже выполнен
        """
        completed = _completed_steps.get()
        step_id = f"{envelope.id}:{step}"

        done = completed is not None and step in completed
        if not done and self.dedup_store is not None:
            done = await self.dedup_store.is_processed(self.service_name, step_id)
        if done:
            await log_info(
                f"Шаг {step} события {envelope.event_name} уже выполнен",
                type_msg=TypeMsg.DEBUG,
                extra={"event_id": envelope.id, "service": self.service_name},
            )
            return None

        result = await func(*args)
        if completed is not None:
            completed.add(step)
        if self.dedup_store is not None:
            await self.dedup_store.mark_processed(self.service_name, step_id)
        return result
