# tests/saga/test_saga_app.py
"""
Тесты для приложения сервиса саги.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from src.common.metrics import get_metrics
from src.saga.app import create_saga_app


def make_client() -> TestClient:
    # Lifespan не запускается: подключение к брокеру не нужно
    return TestClient(create_saga_app("test-service", MagicMock(), title="Test"))


class TestSagaHealth:
    """Тесты для /v1/health."""

    def test_ok(self) -> None:
        bus = MagicMock()
        bus.health_check = AsyncMock(return_value=True)

        with patch("src.saga.app.get_event_bus", return_value=bus):
            response = make_client().get("/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["service"] == "test-service"
        assert body["status"] == "OK"
        assert body["event_bus"] == "connected"

    def test_degraded(self) -> None:
        """Без брокера сервис жив, но помечен DEGRADED."""
        bus = MagicMock()
        bus.health_check = AsyncMock(return_value=False)

        with patch("src.saga.app.get_event_bus", return_value=bus):
            response = make_client().get("/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "DEGRADED"
        assert response.json()["event_bus"] == "disconnected"

    def test_metrics_mounted(self) -> None:
        get_metrics()
        response = make_client().get("/metrics/")
        assert response.status_code == 200
        assert "phonehub_saga_handler_failures" in response.text
