# src/saga/__init__.py
"""
Хореография саги: обработчики событий сервисов.
"""

from src.saga.base import BaseEventHandler, saga_retry_policy

__all__ = ["BaseEventHandler", "saga_retry_policy"]
