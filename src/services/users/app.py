# src/services/users/app.py
"""
FastAPI приложение для User Service (обработчик саги).
"""

from __future__ import annotations

from src.common.constants import USER_SERVICE_NAME
from src.infra.event_bus import EventBus
from src.infra.redis_client import ProcessedEventStore
from src.saga.app import create_saga_app
from src.services.orders.remote import RemoteOrderPort
from src.services.users.handler import UserEventHandler
from src.services.users.remote import RemoteAdminDirectory, RemoteUserPort


def build_handler(event_bus: EventBus, dedup_store: ProcessedEventStore | None) -> UserEventHandler:
    return UserEventHandler(
        RemoteUserPort(),
        RemoteAdminDirectory(),
        RemoteOrderPort(),
        event_bus=event_bus,
        dedup_store=dedup_store,
    )


app = create_saga_app(USER_SERVICE_NAME, build_handler, title="User Service")
