# src/shared/events/base.py
"""
Конверт события и базовые классы полезной нагрузки.

Конверт неизменяем: создаётся продюсером в момент фиксации изменения
и никогда не модифицируется потребителями.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, TypeVar, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    SerializeAsAny,
    StrictFloat,
    StrictInt,
    StrictStr,
)
from pydantic.alias_generators import to_camel

from src.common.errors import DeadLetterError


# =============================================================================
# ОШИБКИ ДЕКОДИРОВАНИЯ
# =============================================================================

class EnvelopeValidationError(DeadLetterError):
    """Событие не прошло валидацию: не хватает полей или неверные типы."""

    def __init__(
        self,
        message: str,
        *,
        event_name: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.event_name = event_name
        self.errors = errors or []


class UnknownEventError(DeadLetterError):
    """Имя события не зарегистрировано ни за одной схемой."""

    def __init__(self, event_name: str) -> None:
        super().__init__(f"Неизвестное событие: {event_name}")
        self.event_name = event_name


# =============================================================================
# ТИПЫ ПОЛЕЙ
# =============================================================================

def _parse_iso_datetime(value: Any) -> Any:
    """Принимает datetime или строку ISO 8601, остальное отклоняет."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    raise ValueError("ожидается дата в формате ISO 8601")


# Денежные суммы и количества приходят числами, строки и bool не принимаются
Number = Union[StrictInt, StrictFloat]
IsoDatetime = Annotated[datetime, BeforeValidator(_parse_iso_datetime)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    """Модель с camelCase-ключами на проводе и snake_case-атрибутами в Python."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class EventPayload(WireModel):
    """
    Базовая полезная нагрузка события.
    Подкласс задаёт event_name и регистрируется декоратором register_event.
    """

    event_name: ClassVar[str] = ""

    def to_envelope(
        self,
        sender_id: str | None = None,
        correlation_id: str | None = None,
    ) -> "EventEnvelope":
        """Упаковывает нагрузку в новый конверт."""
        return EventEnvelope.create(self, sender_id, correlation_id=correlation_id)


class EventEnvelope(WireModel):
    """
    Конверт события.

    Проводной формат:
    {id, eventName, payload, occurredAt, senderId, correlationId, version}
    """

    id: StrictStr = Field(default_factory=lambda: str(uuid4()))
    event_name: StrictStr
    payload: SerializeAsAny[EventPayload]
    occurred_at: IsoDatetime = Field(default_factory=_utcnow)
    sender_id: StrictStr | None = None
    correlation_id: StrictStr | None = None
    version: StrictStr = "1.0"

    @classmethod
    def create(
        cls,
        payload: EventPayload,
        sender_id: str | None = None,
        *,
        correlation_id: str | None = None,
        event_name: str | None = None,
    ) -> "EventEnvelope":
        """Создаёт конверт: присваивает id, время и версию."""
        name = event_name or payload.event_name
        if not name:
            raise ValueError(f"У {type(payload).__name__} не задано имя события")
        return cls(
            event_name=name,
            payload=payload,
            sender_id=sender_id,
            correlation_id=correlation_id,
        )

    @property
    def timestamp_ms(self) -> int:
        """Время события в миллисекундах Unix."""
        return int(self.occurred_at.timestamp() * 1000)

    def to_wire(self) -> dict[str, Any]:
        """Словарь для JSON-тела сообщения."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        """Сериализует конверт в JSON."""
        return self.model_dump_json(by_alias=True)


# =============================================================================
# РЕЕСТР СХЕМ
# =============================================================================

PayloadT = TypeVar("PayloadT", bound=type[EventPayload])

_PAYLOAD_REGISTRY: dict[str, type[EventPayload]] = {}


def register_event(payload_cls: PayloadT) -> PayloadT:
    """Регистрирует схему нагрузки под её именем события."""
    name = payload_cls.event_name
    if not name:
        raise ValueError(f"{payload_cls.__name__}: event_name не задан")
    existing = _PAYLOAD_REGISTRY.get(name)
    if existing is not None and existing is not payload_cls:
        raise ValueError(f"Событие {name} уже зарегистрировано за {existing.__name__}")
    _PAYLOAD_REGISTRY[name] = payload_cls
    return payload_cls


def get_payload_model(event_name: str) -> type[EventPayload] | None:
    return _PAYLOAD_REGISTRY.get(event_name)


def registered_events() -> frozenset[str]:
    return frozenset(_PAYLOAD_REGISTRY)
