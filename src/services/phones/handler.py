# src/services/phones/handler.py
"""
Обработчик событий phone-service.

OrderCreated  -> списание остатков, при остатке <= LOW_STOCK_THRESHOLD публикуется InventoryLow.
OrderUpdated  -> при отмене заказа остатки возвращаются.
События каталога -> полная переиндексация в AI-сервисе.
"""

from __future__ import annotations

from src.common.constants import LOW_STOCK_THRESHOLD, PHONE_SERVICE_NAME, TypeMsg
from src.common.errors import TransportError
from src.common.logger import log_error, log_info
from src.common.metrics import get_metrics
from src.saga.base import BaseEventHandler, EventHandler
from src.services.phones.ports import CatalogIngestion, InventoryPort
from src.shared.events import (
    CATALOG_EVENTS,
    EVT_INVENTORY_LOW,
    EVT_ORDER_CREATED,
    EVT_ORDER_UPDATED,
    InventoryLow,
    OrderCreated,
    OrderUpdated,
)
from src.shared.events.base import EventEnvelope
from src.shared.events.order_events import OrderItemPayload
from src.shared.models.enums import OrderStatus


class PhoneEventHandler(BaseEventHandler):
    """Склад и каталог."""

    def __init__(
        self,
        inventory: InventoryPort,
        ingestion: CatalogIngestion,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.inventory = inventory
        self.ingestion = ingestion
        self.low_stock_threshold = low_stock_threshold

    @property
    def service_name(self) -> str:
        return PHONE_SERVICE_NAME

    @property
    def handlers(self) -> dict[str, EventHandler]:
        handlers: dict[str, EventHandler] = {
            EVT_ORDER_CREATED: self.handle_order_created,
            EVT_ORDER_UPDATED: self.handle_order_updated,
        }
        for event_name in CATALOG_EVENTS:
            handlers[event_name] = self.handle_catalog_changed
        return handlers

    # =========================================================================
    # СКЛАД
    # =========================================================================

    async def _adjust_stock(self, envelope: EventEnvelope, item: OrderItemPayload, delta: int) -> int | None:
        """Меняет остаток позиции на delta. Возвращает новый остаток или None, если позиции нет на складе."""
        inventory = await self.inventory.get_inventory_by_variant_and_color(item.variant_id, item.color_id)
        if inventory is None:
            await log_info(
                f"Нет остатка для variant={item.variant_id} color={item.color_id}",
                type_msg=TypeMsg.WARNING,
                extra={"event_id": envelope.id},
            )
            return None

        new_stock = inventory.stock_quantity + delta
        await self.inventory.update_inventory(inventory.id, new_stock)

        if delta < 0 and new_stock <= self.low_stock_threshold:
            await self._publish_low_stock(envelope, item, new_stock, inventory.id, inventory.sku)
        return new_stock

    async def _publish_low_stock(
        self,
        envelope: EventEnvelope,
        item: OrderItemPayload,
        stock: int,
        inventory_id: int,
        sku: str | None,
    ) -> None:
        signal = InventoryLow(
            variant_id=item.variant_id,
            color_id=item.color_id,
            stock_quantity=stock,
            inventory_id=inventory_id,
            sku=sku,
        )
        low = signal.to_envelope(
            sender_id=self.service_name,
            correlation_id=envelope.correlation_id or envelope.id,
        )
        try:
            await self.event_bus.publish(low)
        except TransportError as e:
            # Списание уже сохранено, InventoryLow не повторяется
            get_metrics().saga_publish_failures_total.labels(
                service=self.service_name, event_name=EVT_INVENTORY_LOW,
            ).inc()
            await log_error(
                f"InventoryLow для variant={item.variant_id} color={item.color_id} не опубликован: {e}",
                extra={"event_id": envelope.id, "stock": stock},
            )
            return

        await log_info(
            f"Низкий остаток: variant={item.variant_id} color={item.color_id} осталось {stock}",
            type_msg=TypeMsg.WARNING,
            extra={"event_id": envelope.id},
        )

    async def handle_order_created(self, envelope: EventEnvelope) -> None:
        order: OrderCreated = envelope.payload
        await log_info(f"Списание остатков по заказу {order.id}", type_msg=TypeMsg.INFO, extra={"event_id": envelope.id})
        for index, item in enumerate(order.items):
            await self.run_step(
                envelope, self._item_step(index, item), self._adjust_stock, envelope, item, -item.quantity,
            )

    async def handle_order_updated(self, envelope: EventEnvelope) -> None:
        order: OrderUpdated = envelope.payload
        if order.status != OrderStatus.CANCELED.value:
            return

        await log_info(f"Возврат остатков по отменённому заказу {order.id}", type_msg=TypeMsg.INFO, extra={"event_id": envelope.id})
        for index, item in enumerate(order.items):
            await self.run_step(
                envelope, self._item_step(index, item), self._adjust_stock, envelope, item, item.quantity,
            )

    @staticmethod
    def _item_step(index: int, item: OrderItemPayload) -> str:
        return f"item:{index}:{item.variant_id}:{item.color_id}"

    # =========================================================================
    # КАТАЛОГ
    # =========================================================================

    async def handle_catalog_changed(self, envelope: EventEnvelope) -> None:
        await log_info(
            f"{envelope.event_name} {getattr(envelope.payload, 'id', '')}: переиндексация каталога",
            type_msg=TypeMsg.INFO,
            extra={"event_id": envelope.id},
        )
        await self.ingestion.trigger()

    async def close(self) -> None:
        await self.ingestion.close()
