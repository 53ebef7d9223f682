# src/services/phones/ports.py
"""
Порты склада и переиндексации каталога.
"""

from __future__ import annotations

from typing import Any, Protocol

from src.shared.models.phone import InventoryDTO


class InventoryPort(Protocol):
    """Операции со складом, нужные саге."""

    async def get_inventory_by_variant_and_color(self, variant_id: int, color_id: int) -> InventoryDTO | None: ...

    async def update_inventory(self, inventory_id: int, stock_quantity: int) -> None: ...


class CatalogIngestion(Protocol):
    """Запуск полной переиндексации каталога."""

    async def trigger(self) -> Any: ...

    async def close(self) -> None: ...
