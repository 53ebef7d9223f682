# src/services/orders/handler.py
"""
Обработчик событий order-service.
"""

from __future__ import annotations

from src.common.constants import ORDER_SERVICE_NAME, PAID_STATUS_NOTE, TypeMsg
from src.common.logger import log_info
from src.saga.base import BaseEventHandler, EventHandler
from src.services.orders.ports import OrderPort
from src.shared.events import EVT_PAYMENT_CREATED, PaymentCreated
from src.shared.events.base import EventEnvelope
from src.shared.models.enums import OrderStatus


class OrderEventHandler(BaseEventHandler):
    """PaymentCreated -> заказ переходит в PAID."""

    def __init__(self, orders: OrderPort, **kwargs) -> None:
        super().__init__(**kwargs)
        self.orders = orders

    @property
    def service_name(self) -> str:
        return ORDER_SERVICE_NAME

    @property
    def handlers(self) -> dict[str, EventHandler]:
        return {EVT_PAYMENT_CREATED: self.handle_payment_created}

    async def handle_payment_created(self, envelope: EventEnvelope) -> None:
        payload: PaymentCreated = envelope.payload
        extra = {"event_id": envelope.id, "order_id": payload.order_id}
        await log_info(
            f"PaymentCreated {payload.id} для заказа {payload.order_id}",
            type_msg=TypeMsg.INFO,
            extra=extra,
        )

        order = await self.orders.get_order_by_id(payload.order_id)
        if order is None:
            await log_info(f"Заказ {payload.order_id} не найден", type_msg=TypeMsg.WARNING, extra=extra)
            return

        if order.is_paid:
            await log_info(f"Заказ {payload.order_id} уже оплачен", type_msg=TypeMsg.DEBUG, extra=extra)
            return

        await self.orders.update_order_status(payload.order_id, OrderStatus.PAID, PAID_STATUS_NOTE)
