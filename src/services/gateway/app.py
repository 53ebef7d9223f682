# src/services/gateway/app.py
"""
FastAPI приложение для API Gateway.

Endpoints:
- GET /v1/health - здоровье шлюза
- GET /v1/health/circuit-breakers - метрики предохранителей (admin)
- GET /v1/health/circuit-breakers/{service_id}/reset - замкнуть цепь (admin)
- GET /v1/health/circuit-breakers/{service_id}/open - разомкнуть цепь (admin)
- GET /metrics - метрики Prometheus
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import make_asgi_app

from src.common.constants import AUTH_SERVICE_NAME, TypeMsg
from src.common.logger import log_info, setup_logging
from src.infra.dispatcher import get_dispatcher
from src.infra.rpc_client import close_rpc_clients, get_rpc_client
from src.services.gateway.auth import TokenValidator
from src.services.gateway.dependencies import cleanup_dependencies, init_dependencies
from src.services.gateway.routes import router


# === LIFESPAN ===

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Жизненный цикл приложения."""
    # Startup
    setup_logging()
    dispatcher = get_dispatcher()
    init_dependencies(
        dispatcher,
        TokenValidator(dispatcher, get_rpc_client(AUTH_SERVICE_NAME)),
    )
    await log_info("API Gateway запущен", type_msg=TypeMsg.INFO)

    yield

    # Shutdown
    cleanup_dependencies()
    await close_rpc_clients()
    await log_info("API Gateway остановлен", type_msg=TypeMsg.INFO)


# === APP ===

app = FastAPI(
    title="API Gateway",
    description="Шлюз: администрирование предохранителей межсервисных вызовов.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(router)
app.mount("/metrics", make_asgi_app())
