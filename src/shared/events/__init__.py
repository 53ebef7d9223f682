# src/shared/events/__init__.py
"""
Схемы событий для RabbitMQ.

События разделены по доменам:
- order_events: создание и изменение заказа
- payment_events: создание платежа
- phone_events: изменения каталога и сигнал низкого остатка

Каждое событие едет в конверте EventEnvelope с id для дедупликации.
"""

from src.shared.events.base import (
    EnvelopeValidationError,
    EventEnvelope,
    EventPayload,
    UnknownEventError,
    register_event,
    registered_events,
)
from src.shared.events.order_events import (
    EVT_ORDER_CREATED,
    EVT_ORDER_UPDATED,
    OrderCreated,
    OrderItemPayload,
    OrderUpdated,
    PaymentMethodRef,
    PointTransactionPayload,
)
from src.shared.events.payment_events import EVT_PAYMENT_CREATED, PaymentCreated
from src.shared.events.phone_events import (
    CATALOG_EVENTS,
    EVT_BRAND_UPDATED,
    EVT_CATEGORY_UPDATED,
    EVT_INVENTORY_LOW,
    EVT_PHONE_CREATED,
    EVT_PHONE_UPDATED,
    EVT_PHONE_VARIANT_UPDATED,
    EVT_VARIANT_CREATED,
    BrandUpdated,
    CategoryUpdated,
    InventoryLow,
    PhoneCreated,
    PhoneUpdated,
    PhoneVariantUpdated,
    VariantCreated,
)
from src.shared.events.codec import decode_event, encode_event

__all__ = [
    # Base
    "EventEnvelope",
    "EventPayload",
    "EnvelopeValidationError",
    "UnknownEventError",
    "register_event",
    "registered_events",
    # Codec
    "decode_event",
    "encode_event",
    # Order events
    "EVT_ORDER_CREATED",
    "EVT_ORDER_UPDATED",
    "OrderCreated",
    "OrderUpdated",
    "OrderItemPayload",
    "PointTransactionPayload",
    "PaymentMethodRef",
    # Payment events
    "EVT_PAYMENT_CREATED",
    "PaymentCreated",
    # Phone events
    "CATALOG_EVENTS",
    "EVT_PHONE_CREATED",
    "EVT_VARIANT_CREATED",
    "EVT_BRAND_UPDATED",
    "EVT_CATEGORY_UPDATED",
    "EVT_PHONE_UPDATED",
    "EVT_PHONE_VARIANT_UPDATED",
    "EVT_INVENTORY_LOW",
    "PhoneCreated",
    "VariantCreated",
    "BrandUpdated",
    "CategoryUpdated",
    "PhoneUpdated",
    "PhoneVariantUpdated",
    "InventoryLow",
]
