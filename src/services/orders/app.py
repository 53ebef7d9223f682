# src/services/orders/app.py
"""
FastAPI приложение для Order Service (обработчик саги).
"""

from __future__ import annotations

from src.common.constants import ORDER_SERVICE_NAME
from src.infra.event_bus import EventBus
from src.infra.redis_client import ProcessedEventStore
from src.saga.app import create_saga_app
from src.services.orders.handler import OrderEventHandler
from src.services.orders.remote import RemoteOrderPort


def build_handler(event_bus: EventBus, dedup_store: ProcessedEventStore | None) -> OrderEventHandler:
    return OrderEventHandler(
        RemoteOrderPort(),
        event_bus=event_bus,
        dedup_store=dedup_store,
    )


app = create_saga_app(ORDER_SERVICE_NAME, build_handler, title="Order Service")
