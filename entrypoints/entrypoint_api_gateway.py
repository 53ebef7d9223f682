#!/usr/bin/env python3
"""
Entrypoint для API Gateway.

Запуск:
    python entrypoints/entrypoint_api_gateway.py

Порт по умолчанию: 3000
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings


def main() -> None:
    """Запустить API Gateway."""
    uvicorn.run(
        "src.services.gateway.app:app",
        host=settings.deployment.HOST,
        port=settings.deployment.API_GATEWAY_PORT,
        reload=settings.system.DEBUG,
        log_level=settings.logging.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
