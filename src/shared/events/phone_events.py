# src/shared/events/phone_events.py
"""
События каталога телефонов и склада.
"""

from __future__ import annotations

from pydantic import StrictInt, StrictStr

from src.shared.events.base import EventPayload, register_event


EVT_PHONE_CREATED = "PhoneCreated"
EVT_VARIANT_CREATED = "VariantCreated"
EVT_BRAND_UPDATED = "BrandUpdated"
EVT_CATEGORY_UPDATED = "CategoryUpdated"
EVT_PHONE_UPDATED = "PhoneUpdated"
EVT_PHONE_VARIANT_UPDATED = "PhoneVariantUpdated"
EVT_INVENTORY_LOW = "InventoryLow"


@register_event
class PhoneCreated(EventPayload):
    """Событие: добавлен телефон."""

    event_name = EVT_PHONE_CREATED

    id: StrictInt
    name: StrictStr
    brand_id: StrictInt
    category_id: StrictInt


@register_event
class VariantCreated(EventPayload):
    """Событие: добавлен вариант телефона."""

    event_name = EVT_VARIANT_CREATED

    id: StrictInt
    phone_id: StrictInt
    variant_name: StrictStr
    description: StrictStr | None = None


@register_event
class BrandUpdated(EventPayload):
    event_name = EVT_BRAND_UPDATED

    id: StrictInt
    name: StrictStr


@register_event
class CategoryUpdated(EventPayload):
    event_name = EVT_CATEGORY_UPDATED

    id: StrictInt
    name: StrictStr


@register_event
class PhoneUpdated(EventPayload):
    event_name = EVT_PHONE_UPDATED

    id: StrictInt
    name: StrictStr | None = None
    brand_id: StrictInt | None = None
    category_id: StrictInt | None = None


@register_event
class PhoneVariantUpdated(EventPayload):
    event_name = EVT_PHONE_VARIANT_UPDATED

    id: StrictInt
    phone_id: StrictInt
    variant_name: StrictStr | None = None
    description: StrictStr | None = None


@register_event
class InventoryLow(EventPayload):
    """Сигнал: остаток после списания опустился до порога или ниже."""

    event_name = EVT_INVENTORY_LOW

    variant_id: StrictInt
    color_id: StrictInt
    stock_quantity: StrictInt
    inventory_id: StrictInt | None = None
    sku: StrictStr | None = None


# События, после которых каталог переиндексируется целиком
CATALOG_EVENTS: tuple[str, ...] = (
    EVT_PHONE_CREATED,
    EVT_VARIANT_CREATED,
    EVT_BRAND_UPDATED,
    EVT_CATEGORY_UPDATED,
    EVT_PHONE_UPDATED,
    EVT_PHONE_VARIANT_UPDATED,
)
