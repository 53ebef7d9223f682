# src/infra/redis_client.py
"""
Клиент Redis и хранилище обработанных событий.
"""

from __future__ import annotations

import redis.asyncio as redis
from redis.exceptions import RedisError

from src.common.constants import TypeMsg
from src.common.logger import get_logger, log_info
from src.common.retry import RetryPolicy, retry_with_backoff

logger = get_logger("redis")


class RedisClient:
    """
    Асинхронный клиент Redis.
    Все ключи получают префикс namespace.
    """

    _instance: RedisClient | None = None
    _client: redis.Redis | None = None

    def __new__(cls) -> RedisClient:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Инициализация (вызывается только один раз благодаря Singleton)."""
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._client = None
        self._namespace = "phonehub"

    @property
    def client(self) -> redis.Redis:
        """Возвращает клиент Redis."""
        if self._client is None:
            raise RuntimeError("Redis клиент не инициализирован. Вызовите connect() сначала.")
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def _make_key(self, key: str) -> str:
        """Добавляет namespace к ключу."""
        return f"{self._namespace}:{key}"

    @retry_with_backoff(RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=5.0, jitter=0.1))
    async def connect(
        self,
        url: str | None = None,
        max_connections: int = 50,
    ) -> None:
        """
        Подключается к Redis.

        Args:
            url: URL Redis (если None, берётся из конфига)
            max_connections: Максимальное количество соединений
        """
        if self._client is not None:
            return

        if url is None:
            from src.config import settings
            url = settings.redis.url
            max_connections = settings.redis.REDIS_MAX_CONNECTIONS
            self._namespace = settings.redis.REDIS_NAMESPACE

        await log_info("Подключение к Redis...", type_msg=TypeMsg.INFO)

        client = redis.from_url(
            url,
            max_connections=max_connections,
            decode_responses=True,
        )
        try:
            await client.ping()
        except RedisError:
            await client.aclose()
            raise

        self._client = client
        await log_info("Подключение к Redis установлено", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Закрывает соединение с Redis."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            await log_info("Соединение с Redis закрыто", type_msg=TypeMsg.INFO)

    # =========================================================================
    # БАЗОВЫЕ ОПЕРАЦИИ
    # =========================================================================

    async def get(self, key: str) -> str | None:
        """Получает значение по ключу."""
        return await self.client.get(self._make_key(key))

    async def set(
        self,
        key: str,
        value: str,
        ttl: int | None = None,
        nx: bool = False,
    ) -> bool:
        """
        Устанавливает значение.

        Args:
            key: Ключ
            value: Значение
            ttl: Время жизни в секундах
            nx: Только если ключа ещё нет (иначе вернётся None)
        """
        return await self.client.set(self._make_key(key), value, ex=ttl, nx=nx)

    async def exists(self, key: str) -> bool:
        """Проверяет существование ключа."""
        return await self.client.exists(self._make_key(key)) > 0

    async def delete(self, key: str) -> int:
        return await self.client.delete(self._make_key(key))

    async def health_check(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False


# =============================================================================
# ОБРАБОТАННЫЕ СОБЫТИЯ
# =============================================================================

class ProcessedEventStore:
    """
    Отметки об обработанных событиях: ключ processed:{service}:{event_id}.

    Срок хранения задаётся явно и должен перекрывать окно повторной доставки.
    На время обработки событие захватывается ключом processing:{service}:{event_id}
    с коротким сроком аренды, чтобы упавший процесс не блокировал повторную доставку.
    """

    def __init__(self, redis_client: RedisClient, ttl_seconds: int, lease_seconds: int = 300) -> None:
        if ttl_seconds <= 0:
            raise ValueError("Срок хранения отметок должен быть положительным")
        if lease_seconds <= 0:
            raise ValueError("Срок аренды должен быть положительным")
        self._redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.lease_seconds = lease_seconds

    @staticmethod
    def key(service: str, event_id: str) -> str:
        return f"processed:{service}:{event_id}"

    @staticmethod
    def claim_key(service: str, event_id: str) -> str:
        return f"processing:{service}:{event_id}"

    async def is_processed(self, service: str, event_id: str) -> bool:
        return await self._redis.exists(self.key(service, event_id))

    async def mark_processed(self, service: str, event_id: str) -> None:
        await self._redis.set(self.key(service, event_id), "1", ttl=self.ttl_seconds)

    async def claim(self, service: str, event_id: str) -> bool:
        """Атомарно захватывает событие (SET NX EX). False, если его уже обрабатывают."""
        return bool(await self._redis.set(
            self.claim_key(service, event_id), "1", ttl=self.lease_seconds, nx=True,
        ))

    async def release(self, service: str, event_id: str) -> None:
        await self._redis.delete(self.claim_key(service, event_id))


async def init_processed_event_store() -> ProcessedEventStore | None:
    """
    Создаёт хранилище отметок, если дедупликация включена в конфигурации.
    Подключает Redis при необходимости.
    """
    from src.config import settings

    if not settings.dedup.DEDUP_ENABLED:
        return None

    client = RedisClient()
    await client.connect()
    return ProcessedEventStore(
        client, settings.dedup.DEDUP_TTL_SECONDS, settings.dedup.DEDUP_LEASE_SECONDS,
    )
