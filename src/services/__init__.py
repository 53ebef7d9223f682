"""
Сервисы приложения.

Архитектура:
- Каждый сервис - независимое FastAPI-приложение
- Асинхронная коммуникация через RabbitMQ (события саги)
- Синхронные вызовы доменных сервисов через RPC за предохранителями

Сервисы:
- gateway: API Gateway (health и администрирование предохранителей)
- orders: отметка заказа оплаченным по PaymentCreated
- payments: COD-платежи по событиям заказа
- phones: склад и переиндексация каталога
"""

__all__: list[str] = []
