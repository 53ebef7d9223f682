# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class UserRole(str, Enum):
    """Роли пользователей (совпадают со значениями в токене)."""
    ADMIN = "admin"
    CUSTOMER = "customer"
    SALES = "sales"
    MANAGER = "manager"


# =============================================================================
# ИМЕНА СЕРВИСОВ
# =============================================================================

API_GATEWAY_NAME = "api-gateway"
AUTH_SERVICE_NAME = "auth-service"
ORDER_SERVICE_NAME = "order-service"
PAYMENT_SERVICE_NAME = "payment-service"
PHONE_SERVICE_NAME = "phone-service"
USER_SERVICE_NAME = "user-service"
VOUCHER_SERVICE_NAME = "voucher-service"


# =============================================================================
# RPC ПАТТЕРНЫ
# =============================================================================

class OrderPattern:
    """Паттерны сообщений order-service."""
    GET_ORDER_BY_ID = "order.getOrderById"
    UPDATE_ORDER_STATUS = "order.updateOrderStatus"
    GET_POINT_CONFIG = "order.getPointConfig"


class PaymentPattern:
    """Паттерны сообщений payment-service."""
    GET_PAYMENT_BY_ORDER_IDS = "payment.getPaymentByOrderIds"
    CREATE_COD_PAYMENT = "payment.createCODPayment"
    UPDATE_PAYMENT = "payment.updatePayment"


class PhonePattern:
    """Паттерны сообщений phone-service."""
    GET_INVENTORY_BY_VARIANT_AND_COLOR = "phone.getInventoryByVariantIdAndColorId"
    UPDATE_INVENTORY = "phone.updateInventory"


class AuthPattern:
    """Паттерны сообщений auth-service."""
    VALIDATE_TOKEN = "auth.validateToken"
    GET_ADMIN_USER_IDS = "auth.getAdminUserIds"


class UserPattern:
    """Паттерны сообщений user-service."""
    GET_CUSTOMER_BY_ID = "user.getCustomerById"
    UPDATE_CUSTOMER = "user.updateCustomer"
    CREATE_NOTIFICATIONS = "user.createNotifications"


class VoucherPattern:
    """Паттерны сообщений voucher-service."""
    MARK_VOUCHERS_AS_USED = "voucher.markVouchersAsUsed"


# Порог низкого остатка на складе (включительно)
LOW_STOCK_THRESHOLD = 10

# Формат даты оплаты (YYYYMMDDHHmmss)
PAY_DATE_FORMAT = "%Y%m%d%H%M%S"

# Комментарий к смене статуса заказа на PAID
PAID_STATUS_NOTE = "Đã thanh toán"
