# src/services/gateway/auth.py
"""
Проверка Bearer-токена через auth-service.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, ValidationError

from src.common.constants import AUTH_SERVICE_NAME, AuthPattern, UserRole
from src.common.errors import RpcError
from src.common.logger import log_warning
from src.infra.dispatcher import CircuitBreakerDispatcher, RpcTransport


class Requester(BaseModel):
    """Владелец токена."""
    model_config = ConfigDict(extra="ignore")

    sub: int | str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def extract_bearer_token(authorization: str | None) -> str | None:
    """Токен из заголовка Authorization: Bearer <token>."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]


class TokenValidator:
    """Валидация токена вызовом auth.validateToken."""

    def __init__(self, dispatcher: CircuitBreakerDispatcher, client: RpcTransport) -> None:
        self.dispatcher = dispatcher
        self.client = client

    async def validate(self, token: str) -> Requester | None:
        """
        Returns:
            Requester или None, если токен недействителен или auth-service недоступен
        """
        try:
            payload = await self.dispatcher.send_request(
                self.client, AUTH_SERVICE_NAME, AuthPattern.VALIDATE_TOKEN, token,
            )
        except RpcError as e:
            await log_warning(f"Токен не прошёл проверку: {e.message}", extra={"status": e.status})
            return None

        try:
            return Requester.model_validate(payload)
        except ValidationError:
            await log_warning("auth-service вернул токен без sub или role")
            return None
