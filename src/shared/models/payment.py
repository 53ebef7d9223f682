# src/shared/models/payment.py
"""
DTO для платежей.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.shared.models.enums import PaymentStatus


class CamelModel(BaseModel):
    """DTO с camelCase-ключами в ответах сервисов."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """Словарь для тела RPC-запроса."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PaymentMethodDTO(CamelModel):
    """Способ оплаты."""

    id: int | None = None
    code: str
    name: str | None = None


class PaymentDTO(CamelModel):
    """DTO платежа для межсервисного взаимодействия."""

    id: int | None = None
    payment_method_id: int | None = None
    order_id: int
    transaction_id: str
    status: PaymentStatus = PaymentStatus.PENDING
    amount: float
    pay_date: str | None = None  # YYYYMMDDHHmmss
    is_deleted: bool = False
    payment_method: PaymentMethodDTO | None = None

    @property
    def method_code(self) -> str | None:
        return self.payment_method.code if self.payment_method else None


class PaymentUpdate(CamelModel):
    """Частичное обновление платежа."""

    status: PaymentStatus | None = None
    pay_date: str | None = None
    updated_at: datetime = Field(default_factory=datetime.now)
