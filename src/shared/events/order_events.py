# src/shared/events/order_events.py
"""
События домена заказов.
"""

from __future__ import annotations

from pydantic import Field, StrictBool, StrictInt, StrictStr

from src.shared.events.base import EventPayload, IsoDatetime, Number, WireModel, register_event


EVT_ORDER_CREATED = "OrderCreated"
EVT_ORDER_UPDATED = "OrderUpdated"


class OrderItemPayload(WireModel):
    """Позиция заказа."""

    order_id: StrictInt
    variant_id: StrictInt
    color_id: StrictInt
    quantity: StrictInt
    price: Number
    discount: Number = 0


class PointTransactionPayload(WireModel):
    """Операция с бонусными баллами в составе заказа."""

    order_id: StrictInt
    customer_id: StrictInt
    type: StrictStr
    points: StrictInt
    money_value: Number
    is_deleted: StrictBool = False


class PaymentMethodRef(WireModel):
    """Выбранный способ оплаты."""

    id: StrictInt | None = None
    code: StrictStr
    name: StrictStr | None = None


@register_event
class OrderCreated(EventPayload):
    """Событие: заказ создан."""

    event_name = EVT_ORDER_CREATED

    id: StrictInt
    customer_id: StrictInt
    order_code: StrictStr
    order_date: IsoDatetime
    total_amount: Number
    discount_amount: Number = 0
    shipping_fee: Number = 0
    final_amount: Number
    recipient_name: StrictStr
    recipient_phone: StrictStr
    status: StrictStr
    street: StrictStr
    commune_id: StrictInt
    province_id: StrictInt
    postal_code: StrictStr | None = None
    items: list[OrderItemPayload]
    point_transactions: list[PointTransactionPayload] = Field(default_factory=list)
    payment_method: PaymentMethodRef | None = None
    voucher_ids: list[StrictInt] = Field(default_factory=list)


@register_event
class OrderUpdated(EventPayload):
    """Событие: изменился статус заказа."""

    event_name = EVT_ORDER_UPDATED

    id: StrictInt
    status: StrictStr
    customer_id: StrictInt | None = None
    order_code: StrictStr | None = None
    items: list[OrderItemPayload] = Field(default_factory=list)
    point_transactions: list[PointTransactionPayload] = Field(default_factory=list)
    is_cod_paid: StrictBool | None = None
