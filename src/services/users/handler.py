# src/services/users/handler.py
"""
Обработчик событий user-service.

OrderCreated   -> уведомления покупателю и администраторам, списание баллов REDEEM.
OrderUpdated   -> уведомление о смене статуса; отмена возвращает баллы REFUND,
                  доставка оплаченного COD-заказа начисляет баллы EARN.
PaymentCreated -> за завершённую оплату начисляются баллы по earnRate.
InventoryLow   -> предупреждение администраторам.
"""

from __future__ import annotations

from src.common.constants import USER_SERVICE_NAME, TypeMsg
from src.common.logger import log_info
from src.saga.base import BaseEventHandler, EventHandler
from src.services.users.ports import AdminDirectory, OrderLookup, UserPort
from src.shared.events import (
    EVT_INVENTORY_LOW,
    EVT_ORDER_CREATED,
    EVT_ORDER_UPDATED,
    EVT_PAYMENT_CREATED,
    InventoryLow,
    OrderCreated,
    OrderUpdated,
    PaymentCreated,
    PointTransactionPayload,
)
from src.shared.events.base import EventEnvelope
from src.shared.models.enums import NotificationType, OrderStatus, PaymentStatus, PointType
from src.shared.models.user import CustomerDTO, CustomerUpdate, NotificationDTO


# Тексты уведомлений для покупателя: статус -> (заголовок, сообщение)
ORDER_STATUS_MESSAGES: dict[str, tuple[str, str]] = {
    OrderStatus.CANCELED.value: (
        "Đơn hàng #{code} đã được hủy.",
        "Số điểm được hoàn lại đã được cập nhật vào tài khoản của bạn.",
    ),
    OrderStatus.PAID.value: (
        "Đơn hàng #{code} đã được thanh toán thành công!",
        "Đơn hàng của bạn sẽ sớm được xử lý và giao đến bạn.",
    ),
    OrderStatus.SHIPPED.value: (
        "Đơn hàng #{code} đang được vận chuyển.",
        "Bạn có thể theo dõi trạng thái vận chuyển trong mục đơn hàng của mình.",
    ),
    OrderStatus.DELIVERED.value: (
        "Đơn hàng #{code} đã được giao thành công!",
        "Cảm ơn bạn đã mua hàng tại cửa hàng PHONEHUB của chúng tôi.",
    ),
}

ORDER_CREATED_CUSTOMER = (
    "Đơn hàng #{code} đã được tạo thành công!",
    "Nếu bạn chọn thanh toán online, vui lòng hoàn tất thanh toán.",
)
ORDER_CREATED_ADMIN = (
    "Đơn hàng #{code} đã được tạo!",
    "Vui lòng kiểm tra và xử lý đơn hàng kịp thời.",
)
INVENTORY_LOW_ADMIN = (
    "Cảnh báo tồn kho thấp cho biến thể SKU: {sku}",
    "Tồn kho của biến thể SKU {sku} đang ở mức thấp: {stock}. Vui lòng kiểm tra và bổ sung.",
)


def sum_points(transactions: list[PointTransactionPayload], point_type: PointType) -> int:
    """Сумма баллов операций заданного типа."""
    return sum(item.points for item in transactions if item.type == point_type.value)


class UserEventHandler(BaseEventHandler):
    """Бонусные баллы и уведомления."""

    def __init__(
        self,
        users: UserPort,
        admins: AdminDirectory,
        orders: OrderLookup,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.users = users
        self.admins = admins
        self.orders = orders

    @property
    def service_name(self) -> str:
        return USER_SERVICE_NAME

    @property
    def handlers(self) -> dict[str, EventHandler]:
        return {
            EVT_ORDER_CREATED: self.handle_order_created,
            EVT_ORDER_UPDATED: self.handle_order_updated,
            EVT_PAYMENT_CREATED: self.handle_payment_created,
            EVT_INVENTORY_LOW: self.handle_inventory_low,
        }

    # =========================================================================
    # БАЛЛЫ
    # =========================================================================

    async def _load_customer(self, envelope: EventEnvelope, customer_id: int | None) -> CustomerDTO | None:
        if customer_id is None:
            await log_info("У заказа нет покупателя, баллы не меняются", type_msg=TypeMsg.DEBUG, extra={"event_id": envelope.id})
            return None
        customer = await self.users.get_customer_by_id(customer_id)
        if customer is None:
            await log_info(
                f"Покупатель {customer_id} не найден",
                type_msg=TypeMsg.WARNING,
                extra={"event_id": envelope.id},
            )
        return customer

    async def _adjust_points(self, envelope: EventEnvelope, customer: CustomerDTO, delta: int) -> int:
        """Меняет баланс на delta (не ниже нуля). Возвращает новый баланс."""
        balance = customer.points_balance + delta
        if balance < 0:
            await log_info(
                f"Баланс покупателя {customer.id} ушёл бы в минус ({balance}), списываем до нуля",
                type_msg=TypeMsg.WARNING,
                extra={"event_id": envelope.id},
            )
            balance = 0

        await self.users.update_customer(customer.id, CustomerUpdate(points_balance=balance))
        await log_info(
            f"Баллы покупателя {customer.id}: {customer.points_balance} -> {balance}",
            type_msg=TypeMsg.INFO,
            extra={"event_id": envelope.id},
        )
        return balance

    # =========================================================================
    # УВЕДОМЛЕНИЯ
    # =========================================================================

    async def _admin_notifications(self, title: str, message: str) -> list[NotificationDTO]:
        admin_ids = await self.admins.get_admin_user_ids()
        return [
            NotificationDTO(user_id=admin_id, title=title, message=message, type=NotificationType.ADMIN)
            for admin_id in admin_ids
        ]

    async def _notify_order_created(self, order: OrderCreated, customer: CustomerDTO) -> None:
        title, message = ORDER_CREATED_CUSTOMER
        notifications = [
            NotificationDTO(
                user_id=customer.user_id,
                title=title.format(code=order.order_code),
                message=message,
                type=NotificationType.ORDER,
            ),
        ]
        admin_title, admin_message = ORDER_CREATED_ADMIN
        notifications += await self._admin_notifications(admin_title.format(code=order.order_code), admin_message)
        await self.users.create_notifications(notifications)

    # =========================================================================
    # ОБРАБОТЧИКИ
    # =========================================================================

    async def handle_order_created(self, envelope: EventEnvelope) -> None:
        order: OrderCreated = envelope.payload
        customer = await self._load_customer(envelope, order.customer_id)
        if customer is None:
            return

        await self.run_step(envelope, "notify", self._notify_order_created, order, customer)

        redeemed = sum_points(order.point_transactions, PointType.REDEEM)
        if redeemed <= 0:
            await log_info(f"Заказ {order.id} без списания баллов", type_msg=TypeMsg.DEBUG, extra={"event_id": envelope.id})
            return
        await self.run_step(envelope, "points", self._adjust_points, envelope, customer, -redeemed)

    async def handle_order_updated(self, envelope: EventEnvelope) -> None:
        order: OrderUpdated = envelope.payload
        texts = ORDER_STATUS_MESSAGES.get(order.status)
        if texts is None:
            await log_info(
                f"Статус {order.status} заказа {order.id} не требует уведомления",
                type_msg=TypeMsg.DEBUG,
                extra={"event_id": envelope.id},
            )
            return

        customer = await self._load_customer(envelope, order.customer_id)
        if customer is None:
            return

        delta = 0
        if order.status == OrderStatus.CANCELED.value:
            delta = sum_points(order.point_transactions, PointType.REFUND)
        elif order.status == OrderStatus.DELIVERED.value and order.is_cod_paid:
            delta = sum_points(order.point_transactions, PointType.EARN)
        if delta > 0:
            await self.run_step(envelope, "points", self._adjust_points, envelope, customer, delta)

        title, message = texts
        notification = NotificationDTO(
            user_id=customer.user_id,
            title=title.format(code=order.order_code or order.id),
            message=message,
            type=NotificationType.ORDER,
        )
        await self.run_step(envelope, "notify", self.users.create_notifications, [notification])

    async def handle_payment_created(self, envelope: EventEnvelope) -> None:
        payment: PaymentCreated = envelope.payload
        extra = {"event_id": envelope.id, "order_id": payment.order_id}
        if payment.status != PaymentStatus.COMPLETED.value:
            await log_info(
                f"Платёж {payment.id} в статусе {payment.status}, баллы не начисляются",
                type_msg=TypeMsg.DEBUG,
                extra=extra,
            )
            return

        order = await self.orders.get_order_by_id(payment.order_id)
        if order is None:
            await log_info(f"Заказ {payment.order_id} не найден", type_msg=TypeMsg.WARNING, extra=extra)
            return

        customer = await self._load_customer(envelope, order.customer_id)
        if customer is None:
            return

        config = await self.orders.get_point_config()
        if config is None:
            await log_info("Правила начисления баллов не заданы", type_msg=TypeMsg.WARNING, extra=extra)
            return

        earned = config.points_for(payment.amount)
        if earned <= 0:
            return
        await self.run_step(envelope, "points", self._adjust_points, envelope, customer, earned)

    async def handle_inventory_low(self, envelope: EventEnvelope) -> None:
        signal: InventoryLow = envelope.payload
        title, message = INVENTORY_LOW_ADMIN
        sku = signal.sku or f"{signal.variant_id}/{signal.color_id}"

        notifications = await self._admin_notifications(
            title.format(sku=sku),
            message.format(sku=sku, stock=signal.stock_quantity),
        )
        if not notifications:
            await log_info("Нет администраторов для уведомления о низком остатке", type_msg=TypeMsg.WARNING, extra={"event_id": envelope.id})
            return

        await self.run_step(envelope, "notify", self.users.create_notifications, notifications)
