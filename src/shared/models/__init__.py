# src/shared/models/__init__.py
"""
Общие DTO и Pydantic-модели для межсервисного взаимодействия.
"""

from src.shared.models.enums import (
    OrderStatus,
    PaymentStatus,
    PayMethod,
    NotificationType,
    PointType,
)
from src.shared.models.order import OrderDTO, PointConfigDTO
from src.shared.models.payment import (
    CamelModel,
    PaymentDTO,
    PaymentMethodDTO,
    PaymentUpdate,
)
from src.shared.models.phone import InventoryDTO, InventoryUpdate
from src.shared.models.user import CustomerDTO, CustomerUpdate, NotificationDTO
from src.shared.models.common import (
    BreakerActionResponse,
    BreakerMetricsResponse,
    ErrorResponse,
    FallbackResponse,
    HealthStatus,
    is_fallback_response,
)

__all__ = [
    # Enums
    "OrderStatus",
    "PaymentStatus",
    "PayMethod",
    "NotificationType",
    "PointType",
    # Order
    "OrderDTO",
    "PointConfigDTO",
    # Payment
    "CamelModel",
    "PaymentDTO",
    "PaymentMethodDTO",
    "PaymentUpdate",
    # Phone
    "InventoryDTO",
    "InventoryUpdate",
    # User
    "CustomerDTO",
    "CustomerUpdate",
    "NotificationDTO",
    # Common
    "BreakerActionResponse",
    "BreakerMetricsResponse",
    "ErrorResponse",
    "FallbackResponse",
    "HealthStatus",
    "is_fallback_response",
]
