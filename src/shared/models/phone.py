# src/shared/models/phone.py
"""
DTO склада (ответ phone-service).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from src.shared.models.payment import CamelModel


class InventoryDTO(CamelModel):
    """Остаток варианта телефона в конкретном цвете."""

    id: int
    variant_id: int
    color_id: int
    sku: str | None = None
    stock_quantity: int


class InventoryUpdate(CamelModel):
    """Обновление остатка."""

    stock_quantity: int
    updated_at: datetime = Field(default_factory=datetime.now)
