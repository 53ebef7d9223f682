# src/services/vouchers/remote.py
"""
Порт ваучеров поверх RPC к voucher-service.
"""

from __future__ import annotations

from src.common.constants import VOUCHER_SERVICE_NAME, VoucherPattern
from src.saga.remote import RemoteService


class RemoteVoucherPort(RemoteService):
    """Реализация VoucherPort через диспетчер."""

    def __init__(self, **kwargs) -> None:
        super().__init__(VOUCHER_SERVICE_NAME, **kwargs)

    async def mark_vouchers_as_used(self, voucher_ids: list[int], order_id: int, customer_id: int) -> None:
        # Повтор для той же пары (заказ, покупатель) voucher-service пропускает
        await self.call(
            VoucherPattern.MARK_VOUCHERS_AS_USED,
            {"voucherIds": voucher_ids, "orderId": order_id, "customerId": customer_id},
        )
