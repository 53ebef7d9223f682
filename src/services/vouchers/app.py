# src/services/vouchers/app.py
"""
FastAPI приложение для Voucher Service (обработчик саги).
"""

from __future__ import annotations

from src.common.constants import VOUCHER_SERVICE_NAME
from src.infra.event_bus import EventBus
from src.infra.redis_client import ProcessedEventStore
from src.saga.app import create_saga_app
from src.services.vouchers.handler import VoucherEventHandler
from src.services.vouchers.remote import RemoteVoucherPort


def build_handler(event_bus: EventBus, dedup_store: ProcessedEventStore | None) -> VoucherEventHandler:
    return VoucherEventHandler(
        RemoteVoucherPort(),
        event_bus=event_bus,
        dedup_store=dedup_store,
    )


app = create_saga_app(VOUCHER_SERVICE_NAME, build_handler, title="Voucher Service")
