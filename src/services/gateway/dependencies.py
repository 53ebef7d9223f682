# src/services/gateway/dependencies.py
"""
Dependency Injection для API Gateway.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException

from src.infra.dispatcher import CircuitBreakerDispatcher
from src.services.gateway.auth import Requester, TokenValidator, extract_bearer_token


# Синглтоны
_dispatcher: CircuitBreakerDispatcher | None = None
_token_validator: TokenValidator | None = None


def init_dependencies(
    dispatcher: CircuitBreakerDispatcher,
    token_validator: TokenValidator,
) -> None:
    """Инициализировать зависимости при старте приложения."""
    global _dispatcher, _token_validator
    _dispatcher = dispatcher
    _token_validator = token_validator


def get_dispatcher() -> CircuitBreakerDispatcher:
    """Получить диспетчер RPC."""
    if _dispatcher is None:
        raise RuntimeError("Диспетчер не инициализирован. Вызовите init_dependencies()")
    return _dispatcher


def get_token_validator() -> TokenValidator:
    """Получить валидатор токенов."""
    if _token_validator is None:
        raise RuntimeError("TokenValidator не инициализирован. Вызовите init_dependencies()")
    return _token_validator


async def get_requester(
    validator: Annotated[TokenValidator, Depends(get_token_validator)],
    authorization: Annotated[str | None, Header()] = None,
) -> Requester:
    """Владелец Bearer-токена. Нет токена или он недействителен - 401."""
    token = extract_bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    requester = await validator.validate(token)
    if requester is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return requester


async def require_admin(requester: Annotated[Requester, Depends(get_requester)]) -> Requester:
    """Доступ только для роли admin, иначе 403."""
    if not requester.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden resource")
    return requester


def cleanup_dependencies() -> None:
    """Очистить ссылки при остановке приложения."""
    global _dispatcher, _token_validator
    _dispatcher = None
    _token_validator = None
