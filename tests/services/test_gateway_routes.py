# tests/services/test_gateway_routes.py
"""
Тесты для маршрутов API Gateway.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.common.errors import RpcError
from src.infra.circuit_breaker import BreakerRegistry, CircuitBreakerOptions, CircuitState
from src.infra.dispatcher import CircuitBreakerDispatcher
from src.services.gateway.app import app
from src.services.gateway.auth import Requester, TokenValidator, extract_bearer_token
from src.services.gateway.dependencies import init_dependencies


ADMIN = {"Authorization": "Bearer admin-token"}
CUSTOMER = {"Authorization": "Bearer customer-token"}


class FakeValidator:
    """Токены: admin-token -> admin, customer-token -> customer, остальные недействительны."""

    async def validate(self, token: str) -> Requester | None:
        if token == "admin-token":
            return Requester(sub=1, role="admin")
        if token == "customer-token":
            return Requester(sub=2, role="customer")
        return None


@pytest.fixture
def dispatcher() -> CircuitBreakerDispatcher:
    return CircuitBreakerDispatcher(BreakerRegistry(CircuitBreakerOptions()))


@pytest.fixture
def client(dispatcher: CircuitBreakerDispatcher) -> TestClient:
    # Без контекстного менеджера lifespan не запускается
    init_dependencies(dispatcher, FakeValidator())
    return TestClient(app)


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/v1/health")
        assert response.status_code == 200
        body = response.json()
        assert body["service"] == "api-gateway"
        assert body["status"] == "OK"


class TestAuthorization:
    """Тесты для проверки доступа к администрированию."""

    def test_no_token(self, client: TestClient) -> None:
        response = client.get("/v1/health/circuit-breakers")
        assert response.status_code == 401

    def test_malformed_header(self, client: TestClient) -> None:
        response = client.get("/v1/health/circuit-breakers", headers={"Authorization": "Token admin-token"})
        assert response.status_code == 401

    def test_invalid_token(self, client: TestClient) -> None:
        response = client.get("/v1/health/circuit-breakers", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_not_admin(self, client: TestClient) -> None:
        response = client.get("/v1/health/circuit-breakers", headers=CUSTOMER)
        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden resource"


class TestCircuitBreakers:
    """Тесты для метрик и ручного управления предохранителями."""

    def test_metrics_empty(self, client: TestClient) -> None:
        response = client.get("/v1/health/circuit-breakers", headers=ADMIN)
        assert response.status_code == 200
        body = response.json()
        assert body["breakers"] == {}
        assert "timestamp" in body

    def test_metrics(self, client: TestClient, dispatcher: CircuitBreakerDispatcher) -> None:
        dispatcher.registry.get_breaker("order-service")

        response = client.get("/v1/health/circuit-breakers", headers=ADMIN)

        stats = response.json()["breakers"]["order-service"]
        assert stats["state"] == "CLOSED"
        assert stats["errorPercentage"] == 0

    def test_open_unknown(self, client: TestClient) -> None:
        response = client.get("/v1/health/circuit-breakers/ghost/open", headers=ADMIN)
        assert response.status_code == 404
        assert response.json()["detail"] == "Circuit breaker for ghost not found"

    def test_reset_unknown(self, client: TestClient) -> None:
        response = client.get("/v1/health/circuit-breakers/ghost/reset", headers=ADMIN)
        assert response.status_code == 404

    def test_open_then_reset(self, client: TestClient, dispatcher: CircuitBreakerDispatcher) -> None:
        breaker = dispatcher.registry.get_breaker("order-service")

        response = client.get("/v1/health/circuit-breakers/order-service/open", headers=ADMIN)
        assert response.json() == {
            "success": True,
            "message": "Circuit breaker for order-service has been opened",
        }
        assert breaker.state is CircuitState.OPEN

        response = client.get("/v1/health/circuit-breakers/order-service/reset", headers=ADMIN)
        assert response.json()["message"] == "Circuit breaker for order-service has been reset"
        assert breaker.state is CircuitState.CLOSED

    def test_open_requires_admin(self, client: TestClient, dispatcher: CircuitBreakerDispatcher) -> None:
        breaker = dispatcher.registry.get_breaker("order-service")

        response = client.get("/v1/health/circuit-breakers/order-service/open", headers=CUSTOMER)

        assert response.status_code == 403
        assert breaker.state is CircuitState.CLOSED


class TestExtractBearerToken:
    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Bearer abc", "abc"),
            (None, None),
            ("", None),
            ("Bearer", None),
            ("Basic abc", None),
            ("Bearer a b", None),
        ],
    )
    def test_extract(self, header: str | None, expected: str | None) -> None:
        assert extract_bearer_token(header) == expected


class TestTokenValidator:
    """Тесты для проверки токена через auth-service."""

    @pytest.mark.asyncio
    async def test_valid(self) -> None:
        dispatcher = AsyncMock()
        dispatcher.send_request = AsyncMock(return_value={"sub": 5, "role": "admin", "iat": 1})
        transport = AsyncMock()

        requester = await TokenValidator(dispatcher, transport).validate("tkn")

        assert requester is not None and requester.is_admin
        dispatcher.send_request.assert_awaited_once_with(transport, "auth-service", "auth.validateToken", "tkn")

    @pytest.mark.asyncio
    async def test_rpc_error(self) -> None:
        dispatcher = AsyncMock()
        dispatcher.send_request = AsyncMock(side_effect=RpcError("jwt expired", status=401))

        assert await TokenValidator(dispatcher, AsyncMock()).validate("tkn") is None

    @pytest.mark.asyncio
    async def test_incomplete_payload(self) -> None:
        dispatcher = AsyncMock()
        dispatcher.send_request = AsyncMock(return_value={"sub": 5})

        assert await TokenValidator(dispatcher, AsyncMock()).validate("tkn") is None
