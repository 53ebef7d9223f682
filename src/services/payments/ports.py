# src/services/payments/ports.py
"""
Порт домена платежей.
"""

from __future__ import annotations

from typing import Protocol

from src.shared.models.payment import PaymentDTO, PaymentUpdate


class PaymentPort(Protocol):
    """Операции с платежами, нужные саге."""

    async def get_payments_by_order_ids(self, order_ids: list[int]) -> list[PaymentDTO]: ...

    async def create_payment(self, payment: PaymentDTO, idempotency_key: str | None = None) -> int | None: ...

    async def update_payment(self, payment_id: int, update: PaymentUpdate) -> None: ...
