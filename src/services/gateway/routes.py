# src/services/gateway/routes.py
"""
Маршруты здоровья и администрирования предохранителей.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from src.common.constants import API_GATEWAY_NAME, TypeMsg
from src.common.logger import log_info
from src.infra.dispatcher import CircuitBreakerDispatcher
from src.services.gateway.auth import Requester
from src.services.gateway.dependencies import get_dispatcher, require_admin
from src.shared.models.common import BreakerActionResponse, BreakerMetricsResponse, HealthStatus

router = APIRouter(prefix="/v1/health", tags=["Health"])


@router.get("", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Проверка здоровья шлюза."""
    return HealthStatus(service=API_GATEWAY_NAME)


@router.get("/circuit-breakers", response_model=BreakerMetricsResponse)
async def get_circuit_breakers(
    _: Annotated[Requester, Depends(require_admin)],
    dispatcher: Annotated[CircuitBreakerDispatcher, Depends(get_dispatcher)],
) -> BreakerMetricsResponse:
    """Состояние и счётчики всех предохранителей."""
    return dispatcher.get_all_metrics()


@router.get("/circuit-breakers/{service_id}/reset", response_model=BreakerActionResponse)
async def reset_circuit_breaker(
    service_id: str,
    requester: Annotated[Requester, Depends(require_admin)],
    dispatcher: Annotated[CircuitBreakerDispatcher, Depends(get_dispatcher)],
) -> BreakerActionResponse:
    """Принудительно замкнуть цепь."""
    if not dispatcher.reset_breaker(service_id):
        raise HTTPException(status_code=404, detail=f"Circuit breaker for {service_id} not found")

    await log_info(
        f"Предохранитель {service_id} замкнут администратором {requester.sub}",
        type_msg=TypeMsg.WARNING,
    )
    return BreakerActionResponse(success=True, message=f"Circuit breaker for {service_id} has been reset")


@router.get("/circuit-breakers/{service_id}/open", response_model=BreakerActionResponse)
async def open_circuit_breaker(
    service_id: str,
    requester: Annotated[Requester, Depends(require_admin)],
    dispatcher: Annotated[CircuitBreakerDispatcher, Depends(get_dispatcher)],
) -> BreakerActionResponse:
    """Принудительно разомкнуть цепь."""
    if not dispatcher.open_breaker(service_id):
        raise HTTPException(status_code=404, detail=f"Circuit breaker for {service_id} not found")

    await log_info(
        f"Предохранитель {service_id} разомкнут администратором {requester.sub}",
        type_msg=TypeMsg.WARNING,
    )
    return BreakerActionResponse(success=True, message=f"Circuit breaker for {service_id} has been opened")
