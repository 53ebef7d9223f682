from enum import Enum


class OrderStatus(str, Enum):
    """Статусы заказа."""
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELED = "canceled"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class PaymentStatus(str, Enum):
    """Статусы оплаты."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class PayMethod(str, Enum):
    """Коды способов оплаты."""
    VNPAY = "VNPAY"
    COD = "COD"

    def __str__(self) -> str:
        return self.value


class PointType(str, Enum):
    """Типы операций с бонусными баллами."""
    EARN = "earn"
    REDEEM = "redeem"
    REFUND = "refund"

    def __str__(self) -> str:
        return self.value


class NotificationType(str, Enum):
    """Типы уведомлений пользователя."""
    INFO = "info"
    ORDER = "order"
    ADMIN = "admin"
    VOUCHER = "voucher"

    def __str__(self) -> str:
        return self.value
