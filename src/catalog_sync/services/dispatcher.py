"""Incremental product sync and webhook dispatch."""

from typing import Any

import structlog

from catalog_sync.infrastructure.redis import EventVersionStore
from catalog_sync.services.catalog_reader import CatalogReader
from catalog_sync.services.catalog_writer import CatalogWriter
from catalog_sync.services.events import (
    PRODUCT_RESOURCE,
    NormalizedEvent,
    SyncAction,
    action_for,
    action_label,
    normalize_event,
)

logger = structlog.get_logger()


class ProductSyncService:
    """Syncs a single product: fetch + upsert, or delete."""

    def __init__(self, reader: CatalogReader, writer: CatalogWriter):
        self.reader = reader
        self.writer = writer

    async def sync_product(
        self, product_id: str, action: SyncAction | str = SyncAction.UPSERT
    ) -> dict[str, Any]:
        action = SyncAction(action)
        if action == SyncAction.DELETE:
            return await self.writer.delete(product_id)
        if action != SyncAction.UPSERT:
            raise ValueError(f"Unsupported sync action: {action.value}")

        product = await self.reader.fetch_by_id(product_id)
        result = await self.writer.upsert(product)
        return {
            "success": True,
            "productId": product_id,
            "operationName": result.operation_name,
            "processedCount": result.processed_count,
        }


class EventDispatcher:
    """Turns one webhook delivery into at most one product sync.

    Never raises for payloads it cannot classify; those are acknowledged as
    ignored so the sender does not redeliver them.
    """

    def __init__(
        self,
        product_sync: ProductSyncService,
        version_store: EventVersionStore | None = None,
    ):
        self.product_sync = product_sync
        self.version_store = version_store

    async def handle(self, payload: Any) -> dict[str, Any]:
        event = normalize_event(payload)
        if event is None:
            return {
                "success": True,
                "action": "ignored",
                "message": "Message received but could not parse",
            }

        logger.info(
            "Received event",
            resource_type_id=event.resource_type_id,
            resource_id=event.resource_id,
            event_type=event.event_type,
            source=event.source,
        )
        if event.resource_type_id != PRODUCT_RESOURCE:
            return self._result(
                event, "ignored", f"Unhandled resource type: {event.resource_type_id}"
            )
        return await self._handle_product_event(event)

    async def _handle_product_event(self, event: NormalizedEvent) -> dict[str, Any]:
        kind = event.kind
        action = action_for(kind)
        if action == SyncAction.IGNORE:
            logger.info("Ignoring product event", event_type=event.event_type)
            return self._result(
                event, "ignored", f"Unhandled product message type: {event.event_type}"
            )

        if self.version_store is not None and await self.version_store.is_stale(
            event.resource_id, event.resource_version
        ):
            logger.info(
                "Skipping stale event",
                resource_id=event.resource_id,
                resource_version=event.resource_version,
            )
            return self._result(
                event,
                "skipped_stale",
                f"Event for product {event.resource_id} is older than the last applied version",
            )

        result = await self.product_sync.sync_product(event.resource_id, action)
        label = action_label(kind)
        if self.version_store is not None:
            await self.version_store.record(event.resource_id, event.resource_version, label)

        logger.info("Product event applied", resource_id=event.resource_id, action=label)
        return {
            **result,
            **self._result(event, label, f"Product {event.resource_id} {label} ({event.event_type})"),
        }

    @staticmethod
    def _result(event: NormalizedEvent, action: str, message: str) -> dict[str, Any]:
        return {
            "success": True,
            "action": action,
            "message": message,
            "resourceTypeId": event.resource_type_id,
            "resourceId": event.resource_id,
            "type": event.event_type,
        }
