# src/saga/app.py
"""
FastAPI-приложение сервиса с обработчиком саги.

Lifespan:
- настраивает логирование
- подключает шину событий (и Redis, если включена дедупликация)
- запускает обработчик (подписка на топики)

Endpoints:
- GET /v1/health - здоровье сервиса
- GET /metrics - метрики Prometheus
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI
from prometheus_client import make_asgi_app

from src.common.constants import TypeMsg
from src.common.logger import log_info, setup_logging
from src.infra.event_bus import EventBus, close_event_bus, get_event_bus, init_event_bus
from src.infra.redis_client import ProcessedEventStore, RedisClient, init_processed_event_store
from src.infra.rpc_client import close_rpc_clients
from src.saga.base import BaseEventHandler
from src.shared.models.common import HealthStatus


HandlerFactory = Callable[[EventBus, ProcessedEventStore | None], BaseEventHandler]


def create_saga_app(service_name: str, build_handler: HandlerFactory, title: str | None = None) -> FastAPI:
    """
    Создаёт приложение сервиса.

    Args:
        service_name: Имя сервиса (в health и логах)
        build_handler: Фабрика обработчика (шина, хранилище отметок)
        title: Заголовок OpenAPI
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Жизненный цикл приложения."""
        # Startup
        setup_logging()
        event_bus = await init_event_bus()
        dedup_store = await init_processed_event_store()

        handler = build_handler(event_bus, dedup_store)
        await handler.start()
        app.state.handler = handler

        await log_info(f"{service_name} запущен", type_msg=TypeMsg.INFO)

        yield

        # Shutdown
        await handler.close()
        await close_rpc_clients()
        await close_event_bus()
        await RedisClient().disconnect()
        await log_info(f"{service_name} остановлен", type_msg=TypeMsg.INFO)

    app = FastAPI(
        title=title or service_name,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url=None,
    )

    @app.get("/v1/health", response_model=HealthStatus, tags=["Health"])
    async def health_check() -> HealthStatus:
        """Проверка здоровья сервиса."""
        connected = await get_event_bus().health_check()
        return HealthStatus(
            service=service_name,
            status="OK" if connected else "DEGRADED",
            event_bus="connected" if connected else "disconnected",
        )

    app.mount("/metrics", make_asgi_app())
    return app
