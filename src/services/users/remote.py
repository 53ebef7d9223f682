# src/services/users/remote.py
"""
Порты user-service поверх RPC.
"""

from __future__ import annotations

from src.common.constants import AUTH_SERVICE_NAME, USER_SERVICE_NAME, AuthPattern, UserPattern
from src.saga.remote import RemoteService
from src.shared.models.user import CustomerDTO, CustomerUpdate, NotificationDTO


class RemoteUserPort(RemoteService):
    """Реализация UserPort через диспетчер."""

    def __init__(self, **kwargs) -> None:
        super().__init__(USER_SERVICE_NAME, **kwargs)

    async def get_customer_by_id(self, customer_id: int) -> CustomerDTO | None:
        result = await self.call_optional(UserPattern.GET_CUSTOMER_BY_ID, customer_id)
        if result is None:
            return None
        return CustomerDTO.model_validate(result)

    async def update_customer(self, customer_id: int, update: CustomerUpdate) -> None:
        await self.call(UserPattern.UPDATE_CUSTOMER, {"id": customer_id, "data": update.to_wire()})

    async def create_notifications(self, notifications: list[NotificationDTO]) -> None:
        await self.call(UserPattern.CREATE_NOTIFICATIONS, [item.to_wire() for item in notifications])


class RemoteAdminDirectory(RemoteService):
    """Список администраторов из auth-service."""

    def __init__(self, **kwargs) -> None:
        super().__init__(AUTH_SERVICE_NAME, **kwargs)

    async def get_admin_user_ids(self) -> list[int]:
        result = await self.call(AuthPattern.GET_ADMIN_USER_IDS, {})
        return [int(user_id) for user_id in result or []]
