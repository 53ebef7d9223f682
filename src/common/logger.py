# src/common/logger.py
"""
Модуль структурированного логирования.
JSON для агрегаторов логов, цветной текст для разработки, ротация файла по размеру.
"""

from __future__ import annotations

import inspect
import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from src.common.constants import TypeMsg


DEFAULT_LOGGER_NAME = "phonehub"

# Общий файловый хендлер для всех логгеров процесса
_FILE_HANDLER: logging.Handler | None = None

# Флаг инициализации (предотвращает повторную настройку)
_LOGGING_INITIALIZED: bool = False


# =============================================================================
# ФОРМАТТЕРЫ
# =============================================================================

class JsonFormatter(logging.Formatter):
    """Форматтер для JSON логов."""

    def format(self, record: logging.LogRecord) -> str:
        """Форматирует запись лога в JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "service": os.getenv("SERVICE_NAME", DEFAULT_LOGGER_NAME),
            "message": record.getMessage(),
        }

        # Контекст события (event_id, event_name, service и т.д.) выносим на верхний уровень
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data.update(
                {k: v for k, v in extra_data.items() if not k.startswith("caller_")}
            )
            if "caller_function" in extra_data:
                log_data["caller"] = (
                    f"{extra_data.get('caller_module')}.{extra_data.get('caller_function')}"
                    f":{extra_data.get('caller_line')}"
                )

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Цветной форматтер для консоли (разработка)."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    GRAY = "\033[90m"

    def format(self, record: logging.LogRecord) -> str:
        """Форматирует запись лога с цветом."""
        color = self.COLORS.get(record.levelname, self.GRAY)
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        caller_info = ""
        context = ""
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            if extra_data.get("caller_function"):
                caller_info = (
                    f" {self.GRAY}[{extra_data.get('caller_module')}."
                    f"{extra_data.get('caller_function')}():{extra_data.get('caller_line')}]{self.RESET}"
                )
            fields = {k: v for k, v in extra_data.items() if not k.startswith("caller_")}
            if fields:
                context = " " + " ".join(f"{k}={v}" for k, v in fields.items())

        message = (
            f"{timestamp} {color}[{record.levelname}]{self.RESET}{caller_info} "
            f"{record.getMessage()}{self.GRAY}{context}{self.RESET}"
        )

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


# =============================================================================
# ЛОГГЕР
# =============================================================================

_loggers: dict[str, logging.Logger] = {}


def setup_logging() -> None:
    """
    Инициализирует систему логирования.
    Может безопасно вызываться многократно (идемпотентна).
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED:
        return

    _LOGGING_INITIALIZED = True

    get_logger(DEFAULT_LOGGER_NAME)

    # Уровни для сторонних библиотек
    logging.getLogger("kombu").setLevel(logging.WARNING)
    logging.getLogger("amqp").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def _read_logging_settings() -> tuple[str, str, bool, str, int]:
    """Читает настройки логирования, с безопасными значениями по умолчанию."""
    try:
        from src.config import settings
        log_settings = settings.logging
        log_level = log_settings.LOG_LEVEL
        log_format = log_settings.LOG_FORMAT
        log_to_file = log_settings.LOG_TO_FILE
        log_file_path = log_settings.LOG_FILE_PATH
        log_max_bytes = log_settings.LOG_MAX_BYTES
    except (ImportError, AttributeError):
        return "DEBUG", "colored", False, "logs/app.log", 10485760

    # Защита от MagicMock в тестах
    if not isinstance(log_level, str):
        log_level = "DEBUG"
    if not isinstance(log_format, str):
        log_format = "colored"
    if not isinstance(log_to_file, bool):
        log_to_file = False
    if not isinstance(log_file_path, str):
        log_file_path = "logs/app.log"
    if not isinstance(log_max_bytes, int):
        log_max_bytes = 10485760
    return log_level, log_format, log_to_file, log_file_path, log_max_bytes


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Возвращает настроенный логгер.
    Использует кэширование для избежания дублирования хендлеров.

    Args:
        name: Имя логгера

    Returns:
        Настроенный логгер
    """
    if name in _loggers:
        return _loggers[name]

    log_level, log_format, log_to_file, log_file_path, log_max_bytes = _read_logging_settings()

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.DEBUG))

    if logger.handlers:
        _loggers[name] = logger
        return logger

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else ColoredFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        global _FILE_HANDLER
        if _FILE_HANDLER is None:
            log_path = Path(log_file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            # У каждого процесса-сервиса свой файл
            service_name = os.getenv("SERVICE_NAME")
            if service_name:
                log_path = log_path.with_name(f"{log_path.stem}_{service_name}{log_path.suffix}")

            _FILE_HANDLER = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=log_max_bytes,
                backupCount=5,
                encoding="utf-8",
            )
            _FILE_HANDLER.setFormatter(JsonFormatter())
        logger.addHandler(_FILE_HANDLER)

    logger.propagate = False

    _loggers[name] = logger
    return logger


# =============================================================================
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ ЛОГИРОВАНИЯ
# =============================================================================

def _get_caller_info() -> dict[str, Any]:
    """
    Получает информацию о коде, вызвавшем функцию логирования.

    Стек: [0] _get_caller_info, [1] log_*, [2] вызывающий код.
    Для log_warning/log_debug, проксирующих в log_info, поднимаемся до первого
    фрейма вне этого модуля.
    """
    frame = inspect.currentframe()
    try:
        caller_frame = frame.f_back if frame else None
        while caller_frame is not None and caller_frame.f_globals.get("__name__") == __name__:
            caller_frame = caller_frame.f_back

        if caller_frame is None:
            return {}

        return {
            "caller_function": caller_frame.f_code.co_name,
            "caller_module": caller_frame.f_globals.get("__name__", "unknown"),
            "caller_line": caller_frame.f_lineno,
        }
    finally:
        # Освобождаем ссылки на фреймы
        del frame


async def log_info(
    message: str,
    *,
    type_msg: TypeMsg = TypeMsg.INFO,
    logger_name: str = DEFAULT_LOGGER_NAME,
    extra: dict[str, Any] | None = None,
) -> None:
    """
    Асинхронная функция логирования.

    Args:
        message: Сообщение для логирования
        type_msg: Уровень сообщения
        logger_name: Имя логгера
        extra: Дополнительные поля (event_id, service и т.д.)
    """
    logger = get_logger(logger_name)
    record_extra = {"extra_data": {**_get_caller_info(), **(extra or {})}}

    match type_msg:
        case TypeMsg.DEBUG:
            logger.debug(message, extra=record_extra)
        case TypeMsg.WARNING:
            logger.warning(message, extra=record_extra)
        case TypeMsg.ERROR:
            logger.error(message, extra=record_extra)
        case TypeMsg.CRITICAL:
            logger.critical(message, extra=record_extra)
        case _:
            logger.info(message, extra=record_extra)


async def log_debug(
    message: str,
    logger_name: str = DEFAULT_LOGGER_NAME,
    extra: dict[str, Any] | None = None,
) -> None:
    """Логирование DEBUG уровня."""
    await log_info(message, type_msg=TypeMsg.DEBUG, logger_name=logger_name, extra=extra)


async def log_warning(
    message: str,
    logger_name: str = DEFAULT_LOGGER_NAME,
    extra: dict[str, Any] | None = None,
) -> None:
    """Логирование WARNING уровня."""
    await log_info(message, type_msg=TypeMsg.WARNING, logger_name=logger_name, extra=extra)


async def log_error(
    message: str,
    logger_name: str = DEFAULT_LOGGER_NAME,
    extra: dict[str, Any] | None = None,
    exc_info: bool = False,
) -> None:
    """
    Логирование ERROR уровня.

    Args:
        message: Сообщение об ошибке
        logger_name: Имя логгера
        extra: Дополнительные поля
        exc_info: Включать ли трейсбек текущего исключения
    """
    logger = get_logger(logger_name)
    record_extra = {"extra_data": {**_get_caller_info(), **(extra or {})}}
    logger.error(message, extra=record_extra, exc_info=exc_info)
