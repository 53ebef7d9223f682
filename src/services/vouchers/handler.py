# src/services/vouchers/handler.py
"""
Обработчик событий voucher-service.
"""

from __future__ import annotations

from src.common.constants import VOUCHER_SERVICE_NAME, TypeMsg
from src.common.logger import log_info
from src.saga.base import BaseEventHandler, EventHandler
from src.services.vouchers.ports import VoucherPort
from src.shared.events import EVT_ORDER_CREATED, OrderCreated
from src.shared.events.base import EventEnvelope


class VoucherEventHandler(BaseEventHandler):
    """OrderCreated -> ваучеры заказа отмечаются использованными."""

    def __init__(self, vouchers: VoucherPort, **kwargs) -> None:
        super().__init__(**kwargs)
        self.vouchers = vouchers

    @property
    def service_name(self) -> str:
        return VOUCHER_SERVICE_NAME

    @property
    def handlers(self) -> dict[str, EventHandler]:
        return {EVT_ORDER_CREATED: self.handle_order_created}

    async def handle_order_created(self, envelope: EventEnvelope) -> None:
        order: OrderCreated = envelope.payload
        extra = {"event_id": envelope.id, "order_id": order.id}
        if not order.voucher_ids:
            await log_info(f"Заказ {order.id} без ваучеров", type_msg=TypeMsg.DEBUG, extra=extra)
            return

        await self.vouchers.mark_vouchers_as_used(order.voucher_ids, order.id, order.customer_id)
        await log_info(
            f"Ваучеры {order.voucher_ids} отмечены использованными в заказе {order.id}",
            type_msg=TypeMsg.INFO,
            extra=extra,
        )
