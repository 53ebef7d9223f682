# src/services/vouchers/ports.py
"""
Порт домена ваучеров.
"""

from __future__ import annotations

from typing import Protocol


class VoucherPort(Protocol):
    """Операции с ваучерами, нужные саге."""

    async def mark_vouchers_as_used(self, voucher_ids: list[int], order_id: int, customer_id: int) -> None: ...
