# src/shared/events/codec.py
"""
Кодек событий: проводной JSON <-> типизированный конверт.

Для каждого имени события свой декодер (схема нагрузки из реестра).
Неизвестные имена отклоняются явно, частично собранный конверт
наружу никогда не попадает.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from src.shared.events.base import (
    EnvelopeValidationError,
    EventEnvelope,
    UnknownEventError,
    get_payload_model,
)

# Импорт модулей регистрирует схемы нагрузки в реестре
from src.shared.events import order_events, payment_events, phone_events  # noqa: F401


_ENVELOPE_KEYS = ("id", "occurredAt", "senderId", "correlationId", "version")


def _load(raw: bytes | str | dict[str, Any]) -> Any:
    if isinstance(raw, dict):
        return raw
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise EnvelopeValidationError(f"Тело события не является JSON: {e}") from e


def decode_event(
    raw: bytes | str | dict[str, Any],
    expected_event: str | None = None,
) -> EventEnvelope:
    """
    Восстанавливает конверт из проводного представления.

    Args:
        raw: Тело сообщения (bytes/str JSON или уже разобранный dict)
        expected_event: Имя события из подписки (routing key); используется,
            если в теле нет eventName, и проверяется на совпадение

    Raises:
        EnvelopeValidationError: битый JSON, нет обязательных полей, неверные типы
        UnknownEventError: имя события не зарегистрировано
    """
    data = _load(raw)
    if not isinstance(data, dict):
        raise EnvelopeValidationError("Тело события должно быть JSON-объектом")

    event_name = data.get("eventName", expected_event)
    if not isinstance(event_name, str) or not event_name:
        raise EnvelopeValidationError("Не указано имя события (eventName)")
    if expected_event is not None and event_name != expected_event:
        raise EnvelopeValidationError(
            f"Имя события {event_name} не совпадает с топиком {expected_event}",
            event_name=event_name,
        )

    payload_model = get_payload_model(event_name)
    if payload_model is None:
        raise UnknownEventError(event_name)

    if "payload" not in data:
        raise EnvelopeValidationError("Нет полезной нагрузки (payload)", event_name=event_name)

    # Отсутствующие id/occurredAt/version получают значения по умолчанию
    fields = {key: data[key] for key in _ENVELOPE_KEYS if data.get(key) is not None}

    try:
        payload = payload_model.model_validate(data["payload"])
        return EventEnvelope.model_validate({**fields, "eventName": event_name, "payload": payload})
    except ValidationError as e:
        raise EnvelopeValidationError(
            f"Событие {event_name} не прошло валидацию: {e.error_count()} ошибок",
            event_name=event_name,
            errors=e.errors(include_url=False),
        ) from e


def encode_event(envelope: EventEnvelope) -> bytes:
    """Сериализует конверт в тело сообщения."""
    return envelope.to_json().encode("utf-8")
