# src/shared/models/user.py
"""
DTO покупателя и уведомлений (user-service).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from src.shared.models.enums import NotificationType
from src.shared.models.payment import CamelModel


class CustomerDTO(CamelModel):
    """Покупатель в объёме, нужном саге."""

    id: int
    user_id: int
    points_balance: int = 0


class CustomerUpdate(CamelModel):
    """Обновление бонусного баланса."""

    points_balance: int
    updated_at: datetime = Field(default_factory=datetime.now)


class NotificationDTO(CamelModel):
    """Новое уведомление пользователю."""

    user_id: int
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    is_read: bool = False
    is_deleted: bool = False
