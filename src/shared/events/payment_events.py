# src/shared/events/payment_events.py
"""
События домена платежей.
"""

from __future__ import annotations

from pydantic import StrictInt, StrictStr

from src.shared.events.base import EventPayload, Number, register_event


EVT_PAYMENT_CREATED = "PaymentCreated"


@register_event
class PaymentCreated(EventPayload):
    """Событие: платёж создан (COD при заказе или VNPay по колбэку шлюза)."""

    event_name = EVT_PAYMENT_CREATED

    id: StrictInt
    payment_method_id: StrictInt
    order_id: StrictInt
    transaction_id: StrictStr
    status: StrictStr
    amount: Number
    pay_date: StrictStr | None = None
