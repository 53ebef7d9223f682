"""
Инфраструктурный слой.
Работа с внешними сервисами: RabbitMQ, Redis, RPC-эндпоинты сервисов.
"""

from src.infra.event_bus import EventBus, get_event_bus
from src.infra.redis_client import ProcessedEventStore, RedisClient

__all__ = [
    "EventBus",
    "get_event_bus",
    "ProcessedEventStore",
    "RedisClient",
]
