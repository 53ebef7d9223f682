# src/services/payments/remote.py
"""
Порт платежей поверх RPC к payment-service.
"""

from __future__ import annotations

from src.common.constants import PAYMENT_SERVICE_NAME, PaymentPattern
from src.saga.remote import RemoteService
from src.shared.models.payment import PaymentDTO, PaymentUpdate


class RemotePaymentPort(RemoteService):
    """Реализация PaymentPort через диспетчер."""

    def __init__(self, **kwargs) -> None:
        super().__init__(PAYMENT_SERVICE_NAME, **kwargs)

    async def get_payments_by_order_ids(self, order_ids: list[int]) -> list[PaymentDTO]:
        result = await self.call(PaymentPattern.GET_PAYMENT_BY_ORDER_IDS, order_ids)
        return [PaymentDTO.model_validate(item) for item in result or []]

    async def create_payment(self, payment: PaymentDTO, idempotency_key: str | None = None) -> int | None:
        """
        Создаёт COD-платёж.

        Args:
            idempotency_key: Ключ повторного запроса (id события), payment-service
                возвращает уже созданный платёж вместо второго
        """
        body = payment.to_wire()
        if idempotency_key is not None:
            body["idempotencyKey"] = idempotency_key
        result = await self.call(PaymentPattern.CREATE_COD_PAYMENT, body)
        return result if isinstance(result, int) else None

    async def update_payment(self, payment_id: int, update: PaymentUpdate) -> None:
        await self.call(PaymentPattern.UPDATE_PAYMENT, {"id": payment_id, "data": update.to_wire()})
