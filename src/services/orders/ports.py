# src/services/orders/ports.py
"""
Порт домена заказов.
"""

from __future__ import annotations

from typing import Protocol

from src.shared.models.enums import OrderStatus
from src.shared.models.order import OrderDTO


class OrderPort(Protocol):
    """Операции с заказами, нужные саге."""

    async def get_order_by_id(self, order_id: int) -> OrderDTO | None: ...

    async def update_order_status(self, order_id: int, status: OrderStatus, note: str | None = None) -> None: ...
