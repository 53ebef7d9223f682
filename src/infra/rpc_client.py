# src/infra/rpc_client.py
"""
HTTP-клиент request/reply для вызовов доменных сервисов.

Запрос:  POST {base_url}/rpc  {"pattern": ..., "data": ..., "id": ...}
Ответ:   {"id": ..., "response": ..., "err": ..., "isDisposed": true}
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import httpx

from src.common.errors import RpcError
from src.common.logger import get_logger

logger = get_logger("rpc_client")


def _error_from_reply(err: Any, pattern: str, data: Any) -> RpcError:
    """Строит RpcError из поля err ответа."""
    if isinstance(err, dict):
        status = err.get("statusCode", err.get("status"))
        code = err.get("code")
        return RpcError(
            str(err.get("message") or "Unknown RPC error"),
            code=code if isinstance(code, str) else None,
            status=status if isinstance(status, int) else None,
            pattern=pattern,
            data=data,
        )
    return RpcError(str(err), pattern=pattern, data=data)


class RpcClient:
    """Клиент одного сервиса."""

    def __init__(
        self,
        base_url: str,
        service_id: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.service_id = service_id
        self.client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def close(self) -> None:
        await self.client.aclose()

    async def send(self, pattern: str, data: Any) -> Any:
        """
        Отправляет запрос и возвращает поле response ответа.

        Raises:
            RpcError: сервис вернул err, HTTP-статус >= 400 или недоступен
        """
        message = {"pattern": pattern, "data": data, "id": str(uuid4())}
        try:
            response = await self.client.post("/rpc", json=message)
        except httpx.TimeoutException as e:
            raise RpcError(
                f"{self.service_id}: таймаут запроса {pattern}",
                code="ETIMEDOUT", status=503, pattern=pattern, data=data,
            ) from e
        except httpx.TransportError as e:
            raise RpcError(
                f"{self.service_id} недоступен: {e}",
                code="ECONNREFUSED", status=503, pattern=pattern, data=data,
            ) from e

        try:
            reply = response.json()
        except ValueError:
            reply = None

        if isinstance(reply, dict) and reply.get("err") is not None:
            raise _error_from_reply(reply["err"], pattern, data)

        if response.status_code >= 400:
            raise RpcError(
                f"{self.service_id}: HTTP {response.status_code} для {pattern}",
                status=response.status_code,
                pattern=pattern,
                data=data,
            )

        if not isinstance(reply, dict):
            raise RpcError(f"{self.service_id}: некорректный ответ на {pattern}", status=502, pattern=pattern, data=data)

        return reply.get("response")


# Клиенты процесса по имени сервиса
_clients: dict[str, RpcClient] = {}


def get_rpc_client(service_id: str) -> RpcClient:
    """Возвращает клиент сервиса, адрес берётся из конфигурации."""
    client = _clients.get(service_id)
    if client is None:
        from src.config import settings
        client = RpcClient(
            settings.rpc.url_for(service_id),
            service_id,
            timeout=settings.rpc.RPC_TIMEOUT,
        )
        _clients[service_id] = client
        logger.debug(f"RPC-клиент {service_id} -> {client.base_url}")
    return client


async def close_rpc_clients() -> None:
    """Закрывает все клиенты процесса."""
    clients = list(_clients.values())
    _clients.clear()
    for client in clients:
        await client.close()
