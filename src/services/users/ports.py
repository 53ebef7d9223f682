# src/services/users/ports.py
"""
Порты покупателей, администраторов и заказов для user-service.
"""

from __future__ import annotations

from typing import Protocol

from src.shared.models.order import OrderDTO, PointConfigDTO
from src.shared.models.user import CustomerDTO, CustomerUpdate, NotificationDTO


class UserPort(Protocol):
    """Покупатели и уведомления."""

    async def get_customer_by_id(self, customer_id: int) -> CustomerDTO | None: ...

    async def update_customer(self, customer_id: int, update: CustomerUpdate) -> None: ...

    async def create_notifications(self, notifications: list[NotificationDTO]) -> None: ...


class AdminDirectory(Protocol):
    """Идентификаторы пользователей с ролью admin."""

    async def get_admin_user_ids(self) -> list[int]: ...


class OrderLookup(Protocol):
    """Чтение заказа и правил начисления баллов."""

    async def get_order_by_id(self, order_id: int) -> OrderDTO | None: ...

    async def get_point_config(self) -> PointConfigDTO | None: ...
