# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Generator
from unittest.mock import AsyncMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("DEDUP_ENABLED", "false")
os.environ.setdefault("REDIS_PASSWORD", "")

from src.common.retry import RetryPolicy  # noqa: E402
from src.infra import dispatcher as dispatcher_module  # noqa: E402
from src.infra import event_bus as event_bus_module  # noqa: E402
from src.infra import rpc_client as rpc_client_module  # noqa: E402
from src.infra.event_bus import EventBus  # noqa: E402
from src.infra.redis_client import RedisClient  # noqa: E402
from src.services.gateway import dependencies as gateway_dependencies  # noqa: E402


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


# =============================================================================
# СБРОС СИНГЛТОНОВ
# =============================================================================

@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Каждый тест начинает с чистых синглтонов."""
    EventBus._instance = None
    event_bus_module._event_bus = None
    RedisClient._instance = None
    RedisClient._client = None
    dispatcher_module._dispatcher = None
    rpc_client_module._clients.clear()
    gateway_dependencies.cleanup_dependencies()
    yield
    EventBus._instance = None
    event_bus_module._event_bus = None
    RedisClient._instance = None
    RedisClient._client = None
    dispatcher_module._dispatcher = None
    rpc_client_module._clients.clear()
    gateway_dependencies.cleanup_dependencies()


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

class FakeClock:
    """Управляемые часы в миллисекундах."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_event_bus() -> AsyncMock:
    """Мок шины событий."""
    event_bus = AsyncMock()
    event_bus.publish = AsyncMock(return_value=None)
    event_bus.subscribe = AsyncMock(return_value=None)
    event_bus.is_connected = True
    return event_bus


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Политика повторов без задержек."""
    from src.common.errors import DeadLetterError
    return RetryPolicy(max_attempts=3, base_delay=0.0, max_delay=0.0, jitter=0.0, give_up_on=(DeadLetterError,))


class InMemoryDedupStore:
    """Хранилище отметок обработанных событий в памяти."""

    def __init__(self) -> None:
        self.keys: set[str] = set()
        self.claims: set[str] = set()

    async def is_processed(self, service: str, event_id: str) -> bool:
        return f"{service}:{event_id}" in self.keys

    async def mark_processed(self, service: str, event_id: str) -> None:
        self.keys.add(f"{service}:{event_id}")

    async def claim(self, service: str, event_id: str) -> bool:
        key = f"{service}:{event_id}"
        if key in self.claims:
            return False
        self.claims.add(key)
        return True

    async def release(self, service: str, event_id: str) -> None:
        self.claims.discard(f"{service}:{event_id}")


@pytest.fixture
def dedup_store() -> InMemoryDedupStore:
    return InMemoryDedupStore()


# =============================================================================
# ФИКСТУРЫ СОБЫТИЙ
# =============================================================================

@pytest.fixture
def order_created_payload() -> dict[str, Any]:
    """Нагрузка OrderCreated в проводном формате."""
    return {
        "id": 42,
        "customerId": 7,
        "orderCode": "ORD-42",
        "orderDate": "2024-05-01T10:00:00Z",
        "totalAmount": 1500,
        "discountAmount": 0,
        "shippingFee": 30,
        "finalAmount": 1530,
        "recipientName": "Nguyen Van A",
        "recipientPhone": "0900000000",
        "status": "pending",
        "street": "1 Le Loi",
        "communeId": 10,
        "provinceId": 1,
        "items": [
            {"orderId": 42, "variantId": 5, "colorId": 2, "quantity": 3, "price": 500},
        ],
        "pointTransactions": [],
        "paymentMethod": {"id": 2, "code": "COD", "name": "Cash on delivery"},
    }


@pytest.fixture
def order_created_wire(order_created_payload: dict[str, Any]) -> dict[str, Any]:
    """Конверт OrderCreated в проводном формате."""
    return {
        "id": "evt-order-42",
        "eventName": "OrderCreated",
        "payload": order_created_payload,
        "occurredAt": "2024-05-01T10:00:01Z",
        "senderId": "order-service",
        "correlationId": "corr-42",
        "version": "1.0",
    }
