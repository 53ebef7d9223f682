# src/services/payments/app.py
"""
FastAPI приложение для Payment Service (обработчик саги).
"""

from __future__ import annotations

from src.common.constants import PAYMENT_SERVICE_NAME
from src.infra.event_bus import EventBus
from src.infra.redis_client import ProcessedEventStore
from src.saga.app import create_saga_app
from src.services.payments.handler import PaymentEventHandler
from src.services.payments.remote import RemotePaymentPort


def build_handler(event_bus: EventBus, dedup_store: ProcessedEventStore | None) -> PaymentEventHandler:
    return PaymentEventHandler(
        RemotePaymentPort(),
        event_bus=event_bus,
        dedup_store=dedup_store,
    )


app = create_saga_app(PAYMENT_SERVICE_NAME, build_handler, title="Payment Service")
