# src/services/users/__init__.py
"""
User Service: бонусные баллы покупателя и уведомления по событиям заказов, оплаты и склада.
"""
