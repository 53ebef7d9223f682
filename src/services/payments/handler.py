# src/services/payments/handler.py
"""
Обработчик событий payment-service.

OrderCreated (COD) -> платёж в статусе pending.
OrderUpdated -> delivered закрывает COD-платёж, failed помечает его неудачным.
"""

from __future__ import annotations

import random
import string
from datetime import datetime

from src.common.constants import PAY_DATE_FORMAT, PAYMENT_SERVICE_NAME, TypeMsg
from src.common.logger import log_info
from src.saga.base import BaseEventHandler, EventHandler
from src.services.payments.ports import PaymentPort
from src.shared.events import EVT_ORDER_CREATED, EVT_ORDER_UPDATED, OrderCreated, OrderUpdated
from src.shared.events.base import EventEnvelope
from src.shared.models.enums import OrderStatus, PaymentStatus, PayMethod
from src.shared.models.payment import PaymentDTO, PaymentUpdate

_TXN_ALPHABET = string.ascii_uppercase + string.digits


def make_transaction_id(order_code: str, rand: random.Random | None = None) -> str:
    """<orderCode>_<5 символов A-Z0-9>."""
    rnd = rand or random
    suffix = "".join(rnd.choice(_TXN_ALPHABET) for _ in range(5))
    return f"{order_code}_{suffix}"


def format_pay_date(moment: datetime | None = None) -> str:
    return (moment or datetime.now()).strftime(PAY_DATE_FORMAT)


class PaymentEventHandler(BaseEventHandler):
    """Создание и закрытие COD-платежей."""

    def __init__(self, payments: PaymentPort, **kwargs) -> None:
        super().__init__(**kwargs)
        self.payments = payments

    @property
    def service_name(self) -> str:
        return PAYMENT_SERVICE_NAME

    @property
    def handlers(self) -> dict[str, EventHandler]:
        return {
            EVT_ORDER_CREATED: self.handle_order_created,
            EVT_ORDER_UPDATED: self.handle_order_updated,
        }

    async def handle_order_created(self, envelope: EventEnvelope) -> None:
        order: OrderCreated = envelope.payload
        extra = {"event_id": envelope.id, "order_id": order.id}

        method = order.payment_method
        if method is None or method.code != PayMethod.COD.value:
            await log_info(
                f"Заказ {order.id} оплачивается не наличными, платёж не создаётся",
                type_msg=TypeMsg.DEBUG,
                extra=extra,
            )
            return

        # Номер транзакции выводится из id события: повтор шлёт тот же платёж
        payment = PaymentDTO(
            payment_method_id=method.id,
            order_id=order.id,
            transaction_id=make_transaction_id(order.order_code, random.Random(envelope.id)),
            status=PaymentStatus.PENDING,
            amount=order.final_amount,
            is_deleted=False,
        )
        payment_id = await self.run_step(
            envelope, "create-payment", self.payments.create_payment, payment, envelope.id,
        )
        await log_info(
            f"COD-платёж {payment_id} создан для заказа {order.id} ({payment.transaction_id})",
            type_msg=TypeMsg.INFO,
            extra=extra,
        )

    async def handle_order_updated(self, envelope: EventEnvelope) -> None:
        order: OrderUpdated = envelope.payload
        extra = {"event_id": envelope.id, "order_id": order.id, "status": order.status}

        payments = await self.payments.get_payments_by_order_ids([order.id])
        if not payments:
            await log_info(f"Платежей по заказу {order.id} нет", type_msg=TypeMsg.DEBUG, extra=extra)
            return

        for payment in payments:
            if payment.status is not PaymentStatus.PENDING or payment.method_code != PayMethod.COD.value:
                continue
            if payment.id is None:
                continue

            if order.status == OrderStatus.DELIVERED.value:
                update = PaymentUpdate(status=PaymentStatus.COMPLETED, pay_date=format_pay_date())
            elif order.status == OrderStatus.FAILED.value:
                update = PaymentUpdate(status=PaymentStatus.FAILED)
            else:
                await log_info(
                    f"Статус заказа {order.status} не меняет платёж {payment.id}",
                    type_msg=TypeMsg.DEBUG,
                    extra=extra,
                )
                continue

            await self.run_step(envelope, f"payment:{payment.id}", self.payments.update_payment, payment.id, update)
            await log_info(
                f"Платёж {payment.id} -> {update.status}",
                type_msg=TypeMsg.INFO,
                extra=extra,
            )
