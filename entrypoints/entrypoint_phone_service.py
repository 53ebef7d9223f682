#!/usr/bin/env python3
"""
Entrypoint для Phone Service.

Запуск:
    python entrypoints/entrypoint_phone_service.py

Порт по умолчанию: 3005
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings


def main() -> None:
    """Запустить Phone Service."""
    uvicorn.run(
        "src.services.phones.app:app",
        host=settings.deployment.HOST,
        port=settings.deployment.PHONE_SERVICE_PORT,
        reload=settings.system.DEBUG,
        log_level=settings.logging.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
