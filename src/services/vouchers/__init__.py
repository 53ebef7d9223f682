# src/services/vouchers/__init__.py
"""
Voucher Service: учёт использованных ваучеров по событию создания заказа.
"""
