# src/common/metrics.py
"""
Метрики Prometheus слоя координации.

Счётчики по сбоям координации:
упавшие обработчики, сообщения в dead-letter, срабатывания предохранителей.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

# Синглтон набора метрик
_metrics: "Metrics | None" = None


# Числовое представление состояния предохранителя для Gauge
BREAKER_STATE_VALUES = {"CLOSED": 0, "HALF-OPEN": 1, "OPEN": 2}


class Metrics:
    """Набор метрик процесса (регистрируется в REGISTRY один раз)."""

    def __init__(self) -> None:
        # Шина событий
        self.events_published_total = Counter(
            "phonehub_events_published_total",
            "Опубликованные события",
            ["event_name"],
        )
        self.events_consumed_total = Counter(
            "phonehub_events_consumed_total",
            "Доставки событий по исходу (ack, requeue, dead_letter)",
            ["queue", "outcome"],
        )
        self.bus_reconnects_total = Counter(
            "phonehub_bus_reconnects_total",
            "Попытки переподключения к брокеру",
            ["result"],
        )

        # Саги
        self.saga_handler_failures_total = Counter(
            "phonehub_saga_handler_failures_total",
            "Обработчики, исчерпавшие повторы",
            ["service", "event_name"],
        )
        self.saga_handler_retries_total = Counter(
            "phonehub_saga_handler_retries_total",
            "Повторные попытки обработчиков",
            ["service", "event_name"],
        )
        self.saga_duplicate_events_total = Counter(
            "phonehub_saga_duplicate_events_total",
            "Повторные доставки, отброшенные по id события",
            ["service", "event_name"],
        )
        self.saga_publish_failures_total = Counter(
            "phonehub_saga_publish_failures_total",
            "Неудачные публикации производных событий",
            ["service", "event_name"],
        )

        # Предохранители
        self.circuit_breaker_state = Gauge(
            "phonehub_circuit_breaker_state",
            "Состояние предохранителя (0=CLOSED, 1=HALF-OPEN, 2=OPEN)",
            ["service"],
        )
        self.circuit_breaker_events_total = Counter(
            "phonehub_circuit_breaker_events_total",
            "События предохранителя",
            ["service", "event"],
        )

    def set_breaker_state(self, service: str, state: str) -> None:
        self.circuit_breaker_state.labels(service=service).set(BREAKER_STATE_VALUES.get(state, 0))


def get_metrics() -> Metrics:
    """Возвращает синглтон метрик."""
    global _metrics
    if _metrics is None:
        _metrics = Metrics()
    return _metrics
