# src/common/retry.py
"""
Повторы с ограниченной экспоненциальной задержкой.
Используется обработчиками саг и циклом переподключения шины.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from src.common.constants import TypeMsg
from src.common.logger import log_error, log_info


T = TypeVar("T")


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    jitter: float = 0.0,
    rand: Callable[[], float] = random.random,
) -> float:
    """
    Задержка перед попыткой номер attempt (с нуля).

    min(max_delay, base_delay * 2**attempt), умноженная на случайный
    коэффициент из [1 - jitter, 1].
    """
    delay = min(max_delay, base_delay * (2 ** attempt))
    if jitter > 0:
        delay *= 1 - jitter * rand()
    return max(delay, 0.0)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Политика повторов.

    Attributes:
        max_attempts: Общее число попыток (включая первую)
        base_delay: Базовая задержка (секунды)
        max_delay: Верхняя граница задержки
        jitter: Доля случайного разброса задержки
        give_up_on: Исключения, которые не повторяются
    """
    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 5.0
    jitter: float = 0.1
    give_up_on: tuple[type[BaseException], ...] = field(default=())

    def delay_for(self, attempt: int) -> float:
        return backoff_delay(attempt, self.base_delay, self.max_delay, self.jitter)

    async def run(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        on_retry: Callable[[int, Exception], Awaitable[None]] | None = None,
        **kwargs: Any,
    ) -> T:
        """
        Выполняет корутину с повторами.
        После последней неудачной попытки пробрасывает последнюю ошибку.
        """
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                if self.give_up_on and isinstance(e, self.give_up_on):
                    raise
                last_error = e
                if attempt < self.max_attempts:
                    if on_retry is not None:
                        await on_retry(attempt, e)
                    await asyncio.sleep(self.delay_for(attempt - 1))

        assert last_error is not None
        raise last_error


def retry_with_backoff(policy: RetryPolicy) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Декоратор: выполняет корутину по политике повторов, логируя каждую неудачу.
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            async def _on_retry(attempt: int, error: Exception) -> None:
                await log_info(
                    f"{func.__name__}: ошибка (попытка {attempt}/{policy.max_attempts}): {error}",
                    type_msg=TypeMsg.WARNING,
                )

            try:
                return await policy.run(func, *args, on_retry=_on_retry, **kwargs)
            except Exception as e:
                await log_error(f"{func.__name__}: не удалось после {policy.max_attempts} попыток: {e}")
                raise

        return wrapper

    return decorator
