# src/services/orders/__init__.py
"""
Order Service: перевод заказа в PAID по событию оплаты.
"""
