# tests/shared/test_event_codec.py
"""
Тесты для конверта событий и кодека.
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from src.common.errors import DeadLetterError
from src.shared.events import (
    CATALOG_EVENTS,
    EVT_INVENTORY_LOW,
    EVT_ORDER_CREATED,
    EnvelopeValidationError,
    EventEnvelope,
    InventoryLow,
    OrderCreated,
    PaymentCreated,
    UnknownEventError,
    decode_event,
    encode_event,
    register_event,
    registered_events,
)
from src.shared.events.base import EventPayload


class TestEventEnvelope:
    """Тесты для EventEnvelope."""

    def test_create_assigns_identity(self) -> None:
        """create присваивает id, время и версию."""
        payload = InventoryLow(variant_id=1, color_id=2, stock_quantity=3)
        envelope = EventEnvelope.create(payload, "phone-service", correlation_id="corr-1")

        assert envelope.event_name == EVT_INVENTORY_LOW
        assert envelope.id
        assert envelope.version == "1.0"
        assert envelope.sender_id == "phone-service"
        assert envelope.correlation_id == "corr-1"
        assert envelope.occurred_at.tzinfo is not None

    def test_ids_are_unique(self) -> None:
        payload = InventoryLow(variant_id=1, color_id=2, stock_quantity=3)
        first = payload.to_envelope()
        second = payload.to_envelope()
        assert first.id != second.id

    def test_envelope_is_frozen(self) -> None:
        """Конверт неизменяем."""
        envelope = InventoryLow(variant_id=1, color_id=2, stock_quantity=3).to_envelope()
        with pytest.raises(Exception):
            envelope.event_name = "Other"  # type: ignore[misc]

    def test_wire_uses_camel_case(self) -> None:
        """Проводной формат использует camelCase-ключи."""
        envelope = InventoryLow(variant_id=1, color_id=2, stock_quantity=3).to_envelope(sender_id="phone-service")
        wire = envelope.to_wire()

        assert set(wire) == {"id", "eventName", "payload", "occurredAt", "senderId", "correlationId", "version"}
        assert wire["payload"]["variantId"] == 1
        assert wire["payload"]["stockQuantity"] == 3

    def test_create_without_event_name(self) -> None:
        """Нагрузка без имени события не упаковывается."""
        class Anonymous(EventPayload):
            value: int

        with pytest.raises(ValueError):
            EventEnvelope.create(Anonymous(value=1))


class TestRegistry:
    """Тесты для реестра схем."""

    def test_known_events_registered(self) -> None:
        names = registered_events()
        assert {"OrderCreated", "OrderUpdated", "PaymentCreated", "InventoryLow"} <= names
        assert set(CATALOG_EVENTS) <= names

    def test_register_twice_same_class(self) -> None:
        """Повторная регистрация того же класса допустима."""
        assert register_event(OrderCreated) is OrderCreated

    def test_register_conflicting_name(self) -> None:
        """Другая схема под тем же именем отклоняется."""
        class FakeOrderCreated(EventPayload):
            event_name = EVT_ORDER_CREATED

        with pytest.raises(ValueError, match="уже зарегистрировано"):
            register_event(FakeOrderCreated)


class TestDecodeEvent:
    """Тесты для decode_event."""

    def test_decode_bytes(self, order_created_wire: dict[str, Any]) -> None:
        """Тело из bytes восстанавливается в типизированный конверт."""
        envelope = decode_event(json.dumps(order_created_wire).encode())

        assert envelope.id == "evt-order-42"
        assert envelope.correlation_id == "corr-42"
        assert isinstance(envelope.payload, OrderCreated)
        assert envelope.payload.items[0].variant_id == 5
        assert envelope.payload.payment_method.code == "COD"

    def test_decode_dict(self, order_created_wire: dict[str, Any]) -> None:
        envelope = decode_event(order_created_wire, expected_event="OrderCreated")
        assert envelope.event_name == "OrderCreated"

    def test_event_name_from_topic(self, order_created_wire: dict[str, Any]) -> None:
        """Без eventName в теле имя берётся из топика."""
        del order_created_wire["eventName"]
        envelope = decode_event(order_created_wire, expected_event="OrderCreated")
        assert isinstance(envelope.payload, OrderCreated)

    def test_missing_envelope_defaults(self, order_created_payload: dict[str, Any]) -> None:
        """Отсутствующие id, время и версия получают значения по умолчанию."""
        envelope = decode_event({"eventName": "OrderCreated", "payload": order_created_payload})
        assert envelope.id
        assert envelope.version == "1.0"

    def test_topic_mismatch(self, order_created_wire: dict[str, Any]) -> None:
        with pytest.raises(EnvelopeValidationError, match="не совпадает"):
            decode_event(order_created_wire, expected_event="OrderUpdated")

    def test_unknown_event(self) -> None:
        """Незарегистрированное имя события отклоняется явно."""
        with pytest.raises(UnknownEventError) as exc_info:
            decode_event({"eventName": "SomethingElse", "payload": {}})
        assert exc_info.value.event_name == "SomethingElse"

    def test_invalid_json(self) -> None:
        with pytest.raises(EnvelopeValidationError):
            decode_event(b"{not json")

    def test_not_an_object(self) -> None:
        with pytest.raises(EnvelopeValidationError):
            decode_event(b"[1, 2, 3]")

    def test_missing_payload(self) -> None:
        with pytest.raises(EnvelopeValidationError, match="payload"):
            decode_event({"eventName": "OrderCreated"})

    def test_missing_required_field(self, order_created_wire: dict[str, Any]) -> None:
        """Нет обязательного поля нагрузки - ошибка валидации с деталями."""
        del order_created_wire["payload"]["orderCode"]
        with pytest.raises(EnvelopeValidationError) as exc_info:
            decode_event(order_created_wire)
        assert exc_info.value.event_name == "OrderCreated"
        assert exc_info.value.errors

    def test_string_amount_rejected(self) -> None:
        """Сумма строкой не принимается."""
        wire = {
            "eventName": "PaymentCreated",
            "payload": {
                "id": 1, "paymentMethodId": 2, "orderId": 3,
                "transactionId": "T", "status": "pending", "amount": "100",
            },
        }
        with pytest.raises(EnvelopeValidationError):
            decode_event(wire)

    def test_errors_are_dead_letter(self) -> None:
        """Ошибки декодирования не повторяются, а уходят в dead-letter."""
        assert issubclass(EnvelopeValidationError, DeadLetterError)
        assert issubclass(UnknownEventError, DeadLetterError)

    def test_encode_then_decode_payment(self) -> None:
        """Закодированный конверт декодируется в то же событие."""
        payload = PaymentCreated(
            id=1, payment_method_id=2, order_id=3, transaction_id="ORD-3_AB12C",
            status="pending", amount=99.5,
        )
        original = payload.to_envelope(sender_id="payment-service")

        restored = decode_event(encode_event(original), expected_event="PaymentCreated")

        assert restored.id == original.id
        assert restored.payload == payload
        assert restored.occurred_at == original.occurred_at
