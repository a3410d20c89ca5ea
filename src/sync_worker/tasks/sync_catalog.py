"""Catalog synchronization tasks."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from celery import shared_task

from catalog_sync.config import get_settings
from catalog_sync.container import SyncContainer, build_container
from catalog_sync.exceptions import UpstreamError

logger = structlog.get_logger()

T = TypeVar("T")


async def _with_container(fn: Callable[[SyncContainer], Awaitable[T]]) -> T:
    container = await build_container(get_settings())
    try:
        return await fn(container)
    finally:
        await container.aclose()


def run_with_container(fn: Callable[[SyncContainer], Awaitable[T]]) -> T:
    """Run ``fn`` against a freshly built container on a new event loop."""
    return asyncio.run(_with_container(fn))


@shared_task(bind=True, max_retries=2, default_retry_delay=600)
def sync_full_catalog(self) -> dict[str, Any]:
    """
    Synchronize the whole source catalog to the Retail catalog.

    Failed batches are reported in the result; the task is retried only
    when the catalog could not be read at all.

    Returns:
        dict: Full sync summary
    """
    logger.info("Starting scheduled full sync")

    async def _run(container: SyncContainer) -> dict[str, Any]:
        result = await container.full_sync.run_full_sync()
        return result.model_dump(mode="json")

    try:
        return run_with_container(_run)
    except UpstreamError as e:
        logger.error("Scheduled full sync failed", error=str(e))
        raise self.retry(exc=e)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def sync_single_product(self, product_id: str, action: str = "upsert") -> dict[str, Any]:
    """
    Upsert or delete a single product.

    Args:
        product_id: The commercetools product id
        action: ``upsert`` or ``delete``

    Returns:
        dict: Sync result
    """
    logger.info("Syncing single product", product_id=product_id, action=action)

    async def _run(container: SyncContainer) -> dict[str, Any]:
        return await container.product_sync.sync_product(product_id, action)

    try:
        return run_with_container(_run)
    except UpstreamError as e:
        logger.warning("Single product sync failed, retrying", product_id=product_id, error=str(e))
        raise self.retry(exc=e)
