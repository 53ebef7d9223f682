# src/common/errors.py
"""
Иерархия исключений слоя координации сервисов.
"""

from __future__ import annotations

from typing import Any


class CoordinationError(Exception):
    """Базовое исключение слоя координации."""


class DeadLetterError(CoordinationError):
    """
    Сообщение нельзя обработать ни сейчас, ни при повторной доставке.
    Шина отклоняет такое сообщение без возврата в очередь (в dead-letter).
    """


class TransportError(CoordinationError):
    """Брокер недоступен: нет соединения или канала."""


class HandlerRetriesExhausted(DeadLetterError):
    """Обработчик события упал после всех повторных попыток."""

    def __init__(self, service: str, event_name: str, event_id: str, attempts: int) -> None:
        self.service = service
        self.event_name = event_name
        self.event_id = event_id
        self.attempts = attempts
        super().__init__(
            f"{service}: обработка {event_name} ({event_id}) не удалась после {attempts} попыток"
        )


class RpcError(CoordinationError):
    """
    Нормализованная ошибка RPC-вызова.

    Поля совпадают с тем, что возвращают нижележащие сервисы:
    message, code, status/statusCode и контекст вызова (pattern, data).
    """

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status: int | None = None,
        pattern: str | None = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.pattern = pattern
        self.data = data

    @property
    def status_code(self) -> int | None:
        return self.status

    def to_dict(self) -> dict[str, Any]:
        """Сериализация для логов и ответов API."""
        result: dict[str, Any] = {"message": self.message}
        if self.code is not None:
            result["code"] = self.code
        if self.status is not None:
            result["status"] = self.status
            result["statusCode"] = self.status
        if self.pattern is not None:
            result["pattern"] = self.pattern
            result["data"] = self.data
        return result


class CircuitOpenError(RpcError):
    """Предохранитель открыт, вызов отклонён без обращения к сервису."""

    def __init__(self, service_id: str, **kwargs: Any) -> None:
        super().__init__(f"Breaker is open for {service_id}", code="EOPENBREAKER", **kwargs)
        self.service_id = service_id


class CircuitTimeoutError(RpcError):
    """Вызов не уложился в таймаут предохранителя."""

    def __init__(self, service_id: str, timeout_ms: int, **kwargs: Any) -> None:
        super().__init__(f"Timed out after {timeout_ms}ms", code="ETIMEDOUT", **kwargs)
        self.service_id = service_id
        self.timeout_ms = timeout_ms
