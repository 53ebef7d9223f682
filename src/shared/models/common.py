# src/shared/models/common.py
"""
Общие модели для всех сервисов.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


def utc_now_iso() -> str:
    """Текущее время UTC в ISO 8601."""
    return datetime.now(timezone.utc).isoformat()


class ErrorResponse(BaseModel):
    """Стандартный ответ с ошибкой."""

    status_code: int
    message: str
    error: dict[str, Any] | None = None


class HealthStatus(BaseModel):
    """Статус здоровья сервиса."""

    service: str
    status: str = "OK"  # OK, DEGRADED
    timestamp: str = Field(default_factory=utc_now_iso)
    event_bus: str | None = None  # connected, disconnected; None - шина не используется


class FallbackResponse(BaseModel):
    """Ответ-заглушка, который возвращается вместо результата недоступного сервиса."""

    fallback: bool = True
    message: str

    @classmethod
    def unavailable(cls, service: str) -> "FallbackResponse":
        """Заглушка по умолчанию: "<Service> service is temporary unavailable"."""
        return cls(message=f"{service.capitalize()} service is temporary unavailable")


def is_fallback_response(result: Any) -> bool:
    """Результат вызова является заглушкой."""
    if isinstance(result, FallbackResponse):
        return True
    return isinstance(result, dict) and result.get("fallback") is True


class BreakerActionResponse(BaseModel):
    """Результат административного действия с предохранителем."""

    success: bool
    message: str


class BreakerMetricsResponse(BaseModel):
    """Метрики всех предохранителей процесса."""

    timestamp: str = Field(default_factory=utc_now_iso)
    breakers: dict[str, dict[str, Any]] = Field(default_factory=dict)
