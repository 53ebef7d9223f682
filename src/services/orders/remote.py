# src/services/orders/remote.py
"""
Порт заказов поверх RPC к order-service.
"""

from __future__ import annotations

from src.common.constants import ORDER_SERVICE_NAME, OrderPattern
from src.saga.remote import RemoteService
from src.shared.models.enums import OrderStatus
from src.shared.models.order import OrderDTO, PointConfigDTO


class RemoteOrderPort(RemoteService):
    """Реализация OrderPort через диспетчер."""

    def __init__(self, **kwargs) -> None:
        super().__init__(ORDER_SERVICE_NAME, **kwargs)

    async def get_order_by_id(self, order_id: int) -> OrderDTO | None:
        result = await self.call_optional(OrderPattern.GET_ORDER_BY_ID, order_id)
        if result is None:
            return None
        return OrderDTO.model_validate(result)

    async def update_order_status(self, order_id: int, status: OrderStatus, note: str | None = None) -> None:
        payload = {"id": order_id, "newStatus": status.value}
        if note is not None:
            payload["note"] = note
        await self.call(OrderPattern.UPDATE_ORDER_STATUS, payload)

    async def get_point_config(self) -> PointConfigDTO | None:
        result = await self.call_optional(OrderPattern.GET_POINT_CONFIG, {})
        if not result:
            return None
        return PointConfigDTO.model_validate(result)
