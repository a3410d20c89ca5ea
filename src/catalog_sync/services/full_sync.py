"""Full catalog synchronization.

Reads the whole source catalog, then imports it in fixed-size batches, one at
a time, with a fixed pause between batches to stay under the destination's
rate limits.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import structlog

from catalog_sync.config import Settings
from catalog_sync.exceptions import CatalogSyncError
from catalog_sync.models import BatchError, FullSyncResult
from catalog_sync.services.catalog_reader import CatalogReader
from catalog_sync.services.catalog_writer import CatalogWriter

logger = structlog.get_logger()

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class FullSyncService:
    """Runs a full catalog sync and reports a summary."""

    def __init__(
        self,
        reader: CatalogReader,
        writer: CatalogWriter,
        batch_size: int = 50,
        batch_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.reader = reader
        self.writer = writer
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.sleep = sleep

    @classmethod
    def from_settings(
        cls, settings: Settings, reader: CatalogReader, writer: CatalogWriter
    ) -> "FullSyncService":
        return cls(
            reader,
            writer,
            batch_size=settings.full_sync_batch_size,
            batch_delay=settings.full_sync_batch_delay_seconds,
        )

    async def run_full_sync(self) -> FullSyncResult:
        """
        Sync every product in the source catalog.

        A failed batch is recorded with its product ids and the run moves on
        to the next one. A failure while reading the catalog aborts the run.

        Returns:
            Summary with totals, per-batch errors and elapsed time
        """
        started = time.perf_counter()
        products = await self.reader.fetch_all()
        batches = chunk(products, self.batch_size)
        logger.info(
            "Starting full sync",
            total_products=len(products),
            batches=len(batches),
            batch_size=self.batch_size,
        )

        processed = 0
        errors: list[BatchError] = []
        for index, batch in enumerate(batches):
            try:
                result = await self.writer.upsert_batch(batch)
                processed += result.processed_count
                logger.info(
                    "Batch imported",
                    batch_index=index,
                    size=len(batch),
                    operation=result.operation_name,
                )
            except Exception as e:
                details = e.to_dict() if isinstance(e, CatalogSyncError) else {"error": str(e)}
                logger.error("Batch failed", batch_index=index, size=len(batch), **details)
                errors.append(
                    BatchError(batch_index=index, error=str(e), products=[p.id for p in batch])
                )

            if index < len(batches) - 1:
                await self.sleep(self.batch_delay)

        result = FullSyncResult(
            total_products=len(products),
            processed_count=processed,
            error_count=sum(len(e.products) for e in errors),
            elapsed_ms=int((time.perf_counter() - started) * 1000),
            errors=errors,
        )
        logger.info(
            "Full sync completed",
            total_products=result.total_products,
            processed_count=result.processed_count,
            error_count=result.error_count,
            elapsed_ms=result.elapsed_ms,
        )
        return result
