# src/services/phones/app.py
"""
FastAPI приложение для Phone Service (обработчик саги).
"""

from __future__ import annotations

from src.common.constants import PHONE_SERVICE_NAME
from src.infra.event_bus import EventBus
from src.infra.ingestion import IngestionClient
from src.infra.redis_client import ProcessedEventStore
from src.saga.app import create_saga_app
from src.services.phones.handler import PhoneEventHandler
from src.services.phones.remote import RemoteInventoryPort


def build_handler(event_bus: EventBus, dedup_store: ProcessedEventStore | None) -> PhoneEventHandler:
    return PhoneEventHandler(
        RemoteInventoryPort(),
        IngestionClient(),
        event_bus=event_bus,
        dedup_store=dedup_store,
    )


app = create_saga_app(PHONE_SERVICE_NAME, build_handler, title="Phone Service")
