# tests/infra/test_ingestion.py
"""
Тесты для клиента переиндексации каталога.
"""

from __future__ import annotations

import httpx
import pytest

from src.infra.ingestion import IngestionClient


class TestIngestionClient:
    """Тесты для IngestionClient.trigger."""

    @pytest.mark.asyncio
    async def test_trigger(self) -> None:
        """Запрос уходит GET на {base}/etl/ingest, возвращается JSON ответа."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "started"})

        client = IngestionClient("http://ai.test/api/v1/ai/", timeout=5.0, transport=httpx.MockTransport(handler))
        result = await client.trigger()
        await client.close()

        assert result == {"status": "started"}
        assert seen[0].method == "GET"
        assert str(seen[0].url) == "http://ai.test/api/v1/ai/etl/ingest"

    @pytest.mark.asyncio
    async def test_trigger_error_status(self) -> None:
        """Ответ с ошибкой пробрасывается, чтобы обработчик повторил вызов."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"message": "boom"})

        client = IngestionClient("http://ai.test", timeout=5.0, transport=httpx.MockTransport(handler))
        with pytest.raises(httpx.HTTPStatusError):
            await client.trigger()
        await client.close()

    @pytest.mark.asyncio
    async def test_trigger_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = IngestionClient("http://ai.test", timeout=5.0, transport=httpx.MockTransport(handler))
        with pytest.raises(httpx.ConnectError):
            await client.trigger()
        await client.close()

    @pytest.mark.asyncio
    async def test_trigger_non_json_body(self) -> None:
        """Успешный ответ с текстовым телом не считается ошибкой и не повторяется."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="Ingestion started")

        client = IngestionClient("http://ai.test", timeout=5.0, transport=httpx.MockTransport(handler))
        result = await client.trigger()
        await client.close()

        assert result is None

    @pytest.mark.asyncio
    async def test_trigger_empty_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        client = IngestionClient("http://ai.test", timeout=5.0, transport=httpx.MockTransport(handler))
        assert await client.trigger() is None
        await client.close()

    def test_defaults_from_settings(self) -> None:
        client = IngestionClient()
        assert client.base_url == "http://localhost:4000/api/v1/ai"
