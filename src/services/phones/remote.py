# src/services/phones/remote.py
"""
Порт склада поверх RPC к phone-service.
"""

from __future__ import annotations

from src.common.constants import PHONE_SERVICE_NAME, PhonePattern
from src.saga.remote import RemoteService
from src.shared.models.phone import InventoryDTO, InventoryUpdate


class RemoteInventoryPort(RemoteService):
    """Реализация InventoryPort через диспетчер."""

    def __init__(self, **kwargs) -> None:
        super().__init__(PHONE_SERVICE_NAME, **kwargs)

    async def get_inventory_by_variant_and_color(self, variant_id: int, color_id: int) -> InventoryDTO | None:
        result = await self.call_optional(
            PhonePattern.GET_INVENTORY_BY_VARIANT_AND_COLOR,
            {"variantId": variant_id, "colorId": color_id},
        )
        if not result:
            return None
        return InventoryDTO.model_validate(result)

    async def update_inventory(self, inventory_id: int, stock_quantity: int) -> None:
        update = InventoryUpdate(stock_quantity=stock_quantity)
        await self.call(PhonePattern.UPDATE_INVENTORY, {"id": inventory_id, "data": update.to_wire()})
