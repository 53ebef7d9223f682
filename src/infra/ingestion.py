# src/infra/ingestion.py
"""
Клиент запуска переиндексации каталога в AI-сервисе.
"""

from __future__ import annotations

from typing import Any

import httpx

from src.common.constants import TypeMsg
from src.common.logger import log_error, log_info


class IngestionClient:
    """GET {AI_SERVICE_URL}/etl/ingest - полная переиндексация каталога."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if base_url is None or timeout is None:
            from src.config import settings
            base_url = base_url or settings.ingestion.AI_SERVICE_URL
            timeout = timeout or settings.ingestion.INGEST_TIMEOUT

        self.base_url = base_url.rstrip("/")
        self.http = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Закрыть HTTP клиент."""
        await self.http.aclose()

    async def trigger(self) -> Any:
        """
        Запускает переиндексацию.
        Возвращает JSON ответа или None, если тело успешного ответа не JSON.

        Raises:
            httpx.HTTPError: сервис недоступен или ответил ошибкой
        """
        try:
            response = await self.http.get(f"{self.base_url}/etl/ingest")
            response.raise_for_status()
        except httpx.HTTPError as e:
            await log_error(f"ETL Ingestion failed: {e}")
            raise

        try:
            data = response.json()
        except ValueError:
            # Переиндексация уже запущена, тело ответа не JSON
            await log_info(
                f"ETL Ingestion started, non-JSON response ({response.status_code})",
                type_msg=TypeMsg.WARNING,
            )
            return None

        await log_info(f"ETL Ingestion started successfully: {data}", type_msg=TypeMsg.INFO)
        return data
