#!/usr/bin/env python3
# main.py
"""
Главная точка входа PhoneHub.
Запускает API Gateway и сервисы саги (заказы, платежи, телефоны, пользователи, ваучеры)
в одном процессе или по отдельности в зависимости от COMPONENT_MODE.
"""

from __future__ import annotations

import asyncio
import signal
import sys

from src.config import settings
from src.common.logger import setup_logging, log_info, log_error
from src.common.constants import TypeMsg


# Глобальный флаг для graceful shutdown
_shutdown_event: asyncio.Event | None = None
_running_tasks: list[asyncio.Task] = []


# Компонент -> (модуль приложения, атрибут порта, название)
COMPONENTS: dict[str, tuple[str, str, str]] = {
    "api_gateway": ("src.services.gateway.app:app", "API_GATEWAY_PORT", "API Gateway"),
    "order_service": ("src.services.orders.app:app", "ORDER_SERVICE_PORT", "Order Service"),
    "payment_service": ("src.services.payments.app:app", "PAYMENT_SERVICE_PORT", "Payment Service"),
    "phone_service": ("src.services.phones.app:app", "PHONE_SERVICE_PORT", "Phone Service"),
    "user_service": ("src.services.users.app:app", "USER_SERVICE_PORT", "User Service"),
    "voucher_service": ("src.services.vouchers.app:app", "VOUCHER_SERVICE_PORT", "Voucher Service"),
}

VALID_MODES = tuple(COMPONENTS) + ("all",)


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        """Обработчик сигналов SIGINT и SIGTERM."""
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()
            # Отменяем все запущенные задачи
            for task in _running_tasks:
                if not task.done():
                    task.cancel()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


async def run_component(name: str) -> None:
    """Запускает один компонент в uvicorn."""
    import uvicorn

    app_path, port_attr, title = COMPONENTS[name]
    port = getattr(settings.deployment, port_attr)

    await log_info(f"Запуск {title} на порту {port}...", type_msg=TypeMsg.INFO)

    config = uvicorn.Config(
        app_path,
        host=settings.deployment.HOST,
        port=port,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    # Сигналы обрабатывает сам лаунчер
    server.install_signal_handlers = lambda: None
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info(f"{title}: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


async def run_all() -> None:
    """Запускает все компоненты одновременно."""
    global _running_tasks

    await log_info("Запуск всех компонентов...", type_msg=TypeMsg.INFO)

    _running_tasks = [
        asyncio.create_task(run_component(name), name=name)
        for name in COMPONENTS
    ]
    results = await asyncio.gather(*_running_tasks, return_exceptions=True)

    for name, result in zip(COMPONENTS, results):
        if isinstance(result, Exception):
            await log_error(f"Компонент {name} завершился с ошибкой: {result}")


def resolve_mode(mode: str | None) -> str:
    """
    Определяет режим запуска.

    Args:
        mode: Режим из аргументов командной строки (None - из COMPONENT_MODE)

    Raises:
        ValueError: неизвестный режим
    """
    mode = (mode or settings.system.COMPONENT_MODE or "all").strip().lower()
    if mode not in VALID_MODES:
        raise ValueError(f"Неизвестный режим '{mode}'. Допустимые: {', '.join(VALID_MODES)}")
    return mode


async def main(mode: str | None = None) -> None:
    """
    Главная функция запуска.

    Args:
        mode: Режим запуска (api_gateway, order_service, payment_service, phone_service, user_service, voucher_service, all).
              Если None, берётся COMPONENT_MODE из настроек.
    """
    global _running_tasks

    setup_logging()
    setup_signal_handlers()

    mode = resolve_mode(mode)
    await log_info(
        f"{settings.system.PROJECT_NAME} v{settings.system.VERSION}: запуск в режиме '{mode}'",
        type_msg=TypeMsg.INFO,
    )

    try:
        if mode == "all":
            await run_all()
        else:
            task = asyncio.create_task(run_component(mode), name=mode)
            _running_tasks = [task]
            await task
    except asyncio.CancelledError:
        await log_info("Запуск прерван", type_msg=TypeMsg.DEBUG)
    finally:
        await log_info("Приложение остановлено", type_msg=TypeMsg.INFO)


if __name__ == "__main__":
    cli_mode = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        asyncio.run(main(cli_mode))
    except KeyboardInterrupt:
        pass
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(2)
