# tests/common/test_logger.py
"""
Тесты для модуля логирования.
"""

from __future__ import annotations

import json
import logging

import pytest

from src.common.constants import TypeMsg
from src.common.logger import (
    ColoredFormatter,
    JsonFormatter,
    get_logger,
    log_error,
    log_info,
    setup_logging,
)


def _record(message: str = "test", **extra_data) -> logging.LogRecord:
    record = logging.LogRecord("phonehub", logging.INFO, __file__, 1, message, None, None)
    if extra_data:
        record.extra_data = extra_data
    return record


class TestJsonFormatter:
    """Тесты для JsonFormatter."""

    def test_basic_fields(self) -> None:
        data = json.loads(JsonFormatter().format(_record("hello")))

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["timestamp"].endswith("Z")

    def test_event_context_on_top_level(self) -> None:
        """Контекст события выносится на верхний уровень, caller склеивается."""
        record = _record(
            event_id="evt-1",
            event_name="OrderCreated",
            caller_function="handle",
            caller_module="src.saga.base",
            caller_line=10,
        )
        data = json.loads(JsonFormatter().format(record))

        assert data["event_id"] == "evt-1"
        assert data["event_name"] == "OrderCreated"
        assert data["caller"] == "src.saga.base.handle:10"
        assert "caller_function" not in data


class TestColoredFormatter:
    """Тесты для ColoredFormatter."""

    def test_includes_context(self) -> None:
        output = ColoredFormatter().format(_record("msg", queue="order-service.PaymentCreated"))
        assert "msg" in output
        assert "queue=order-service.PaymentCreated" in output


class TestGetLogger:
    """Тесты для get_logger."""

    def test_cached(self) -> None:
        """Логгер с тем же именем возвращается из кэша."""
        assert get_logger("test_cached") is get_logger("test_cached")

    def test_single_handler(self) -> None:
        logger = get_logger("test_single_handler")
        get_logger("test_single_handler")
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_setup_logging_idempotent(self) -> None:
        setup_logging()
        setup_logging()
        assert logging.getLogger("kombu").level == logging.WARNING


class TestAsyncLogging:
    """Тесты для асинхронных функций логирования."""

    @pytest.mark.asyncio
    async def test_log_info_levels(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("test_levels")
        logger.propagate = True
        try:
            with caplog.at_level(logging.DEBUG, logger="test_levels"):
                await log_info("warn message", type_msg=TypeMsg.WARNING, logger_name="test_levels")
                await log_error("error message", logger_name="test_levels", extra={"event_id": "e1"})
        finally:
            logger.propagate = False

        levels = {r.getMessage(): r.levelno for r in caplog.records}
        assert levels["warn message"] == logging.WARNING
        assert levels["error message"] == logging.ERROR

        error_record = next(r for r in caplog.records if r.getMessage() == "error message")
        assert error_record.extra_data["event_id"] == "e1"
        assert error_record.extra_data["caller_function"] == "test_log_info_levels"
