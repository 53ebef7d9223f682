# src/shared/models/order.py
"""
DTO заказа (ответ order-service).
"""

from __future__ import annotations

from src.shared.models.enums import OrderStatus
from src.shared.models.payment import CamelModel


class OrderDTO(CamelModel):
    """Заказ в объёме, нужном саге."""

    id: int
    customer_id: int | None = None
    order_code: str | None = None
    status: OrderStatus
    final_amount: float | None = None

    @property
    def is_paid(self) -> bool:
        return self.status is OrderStatus.PAID


class PointConfigDTO(CamelModel):
    """Действующие правила начисления баллов."""

    earn_rate: int
    redeem_rate: int | None = None

    def points_for(self, amount: float) -> int:
        """Баллы за оплату: floor(amount / earn_rate), 0 при нулевой ставке."""
        if self.earn_rate <= 0:
            return 0
        return int(amount // self.earn_rate)
