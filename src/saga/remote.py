# src/saga/remote.py
"""
База для адаптеров доменных портов поверх RPC.
"""

from __future__ import annotations

from typing import Any

from src.common.errors import RpcError
from src.infra.dispatcher import CircuitBreakerDispatcher, RpcTransport, get_dispatcher


class RemoteService:
    """
    Вызовы одного доменного сервиса через диспетчер.
    Fallback не задаётся: ошибки уходят в повторы обработчика.
    """

    def __init__(
        self,
        service_id: str,
        dispatcher: CircuitBreakerDispatcher | None = None,
        client: RpcTransport | None = None,
    ) -> None:
        self.service_id = service_id
        self.dispatcher = dispatcher or get_dispatcher()
        if client is None:
            from src.infra.rpc_client import get_rpc_client
            client = get_rpc_client(service_id)
        self.client = client

    async def call(self, pattern: str, data: Any) -> Any:
        return await self.dispatcher.send_request(self.client, self.service_id, pattern, data)

    async def call_optional(self, pattern: str, data: Any) -> Any | None:
        """Как call, но ответ 404 превращается в None."""
        try:
            return await self.call(pattern, data)
        except RpcError as e:
            if e.status == 404:
                return None
            raise
