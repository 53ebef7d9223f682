# tests/config/test_loader.py
"""
Тесты для модуля загрузки конфигурации.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.config.loader import (
    CircuitBreakerSettings,
    DedupSettings,
    RabbitMQSettings,
    RedisSettings,
    RpcSettings,
    Settings,
    get_config_path,
    get_project_root,
    load_config_json,
)


class TestPaths:
    """Тесты для путей проекта."""

    def test_root_contains_src_and_config(self) -> None:
        root = get_project_root()
        assert (root / "src").exists()
        assert (root / "config").exists()

    def test_config_path(self, config_path: Path) -> None:
        assert get_config_path() == config_path

    def test_load_config_json(self) -> None:
        data = load_config_json()
        assert data["RABBITMQ_EXCHANGE"] == "events"
        assert data["CIRCUIT_BREAKER_VOLUME_THRESHOLD"] == 20

    def test_missing_config(self, tmp_path: Path) -> None:
        with patch("src.config.loader.get_config_path", return_value=tmp_path / "missing.json"):
            with pytest.raises(FileNotFoundError):
                load_config_json()


class TestSections:
    """Тесты для секций настроек."""

    def test_circuit_breaker_defaults(self) -> None:
        cb = CircuitBreakerSettings()
        assert cb.CIRCUIT_BREAKER_TIMEOUT_MS == 5000
        assert cb.CIRCUIT_BREAKER_RESET_TIMEOUT_MS == 10000
        assert cb.CIRCUIT_BREAKER_ERROR_THRESHOLD_PERCENT == 70
        assert cb.CIRCUIT_BREAKER_VOLUME_THRESHOLD == 20
        assert cb.CIRCUIT_BREAKER_COUNT_ALL_ERRORS is False

    @pytest.mark.parametrize("raw", ["abc", 0, -5, None])
    def test_invalid_prefetch_falls_back(self, raw) -> None:
        """Некорректный prefetch заменяется на 10."""
        assert RabbitMQSettings(RABBITMQ_PREFETCH_COUNT=raw).RABBITMQ_PREFETCH_COUNT == 10

    def test_valid_prefetch(self) -> None:
        assert RabbitMQSettings(RABBITMQ_PREFETCH_COUNT="25").RABBITMQ_PREFETCH_COUNT == 25

    def test_redis_url(self) -> None:
        assert RedisSettings().url == "redis://localhost:6379/0"
        assert RedisSettings(REDIS_PASSWORD="secret").url == "redis://:secret@localhost:6379/0"

    def test_rpc_url_for(self) -> None:
        rpc = RpcSettings()
        assert rpc.url_for("order-service") == "http://localhost:4103"
        assert rpc.url_for("auth-service") == "http://localhost:4101"
        assert rpc.url_for("user-service") == "http://localhost:4102"
        assert rpc.url_for("voucher-service") == "http://localhost:4106"
        with pytest.raises(KeyError):
            rpc.url_for("unknown-service")

    def test_dedup_requires_ttl(self) -> None:
        """При включённой дедупликации срок хранения обязателен."""
        with pytest.raises(ValidationError):
            DedupSettings(DEDUP_ENABLED=True)
        assert DedupSettings(DEDUP_ENABLED=True, DEDUP_TTL_SECONDS=86400).DEDUP_TTL_SECONDS == 86400
        assert DedupSettings().DEDUP_ENABLED is False
        assert DedupSettings().DEDUP_LEASE_SECONDS == 300


class TestFromConfigJson:
    """Тесты для Settings.from_config_json."""

    def _write(self, tmp_path: Path, data: dict) -> Path:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_reads_file(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, {
            "_comment_x": "ignored",
            "RABBITMQ_EXCHANGE": "test.events",
            "API_GATEWAY_PORT": 3100,
        })
        with patch("src.config.loader.get_config_path", return_value=path):
            settings = Settings.from_config_json()

        assert settings.rabbitmq.RABBITMQ_EXCHANGE == "test.events"
        assert settings.deployment.API_GATEWAY_PORT == 3100
        assert settings.deployment.ORDER_SERVICE_PORT == 3003

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Переменная окружения важнее значения из файла."""
        path = self._write(tmp_path, {"RABBITMQ_EXCHANGE": "file.events", "SAGA_RETRY_ATTEMPTS": 3})
        monkeypatch.setenv("RABBITMQ_EXCHANGE", "env.events")
        monkeypatch.setenv("SAGA_RETRY_ATTEMPTS", "5")
        monkeypatch.setenv("CIRCUIT_BREAKER_COUNT_ALL_ERRORS", "true")

        with patch("src.config.loader.get_config_path", return_value=path):
            settings = Settings.from_config_json()

        assert settings.rabbitmq.RABBITMQ_EXCHANGE == "env.events"
        assert settings.saga.SAGA_RETRY_ATTEMPTS == 5
        assert settings.circuit_breaker.CIRCUIT_BREAKER_COUNT_ALL_ERRORS is True

    def test_dedup_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = self._write(tmp_path, {})
        monkeypatch.setenv("DEDUP_ENABLED", "true")
        monkeypatch.setenv("DEDUP_TTL_SECONDS", "3600")

        with patch("src.config.loader.get_config_path", return_value=path):
            settings = Settings.from_config_json()

        assert settings.dedup.DEDUP_ENABLED is True
        assert settings.dedup.DEDUP_TTL_SECONDS == 3600
