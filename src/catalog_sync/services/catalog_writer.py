"""Catalog writer: imports, deletes and operation polling against Retail."""

from typing import Any

import structlog

from catalog_sync.exceptions import (
    ImportOperationFailed,
    ImportOperationTimeout,
    UpstreamError,
)
from catalog_sync.infrastructure.retail import RetailClient
from catalog_sync.models import ImportResult, SourceProduct
from catalog_sync.services.polling import PollPolicy
from catalog_sync.services.transformer import ProductTransformer

logger = structlog.get_logger()


class CatalogWriter:
    """Writes transformed products to the destination catalog.

    An upsert only returns once the import operation reports ``done``; a
    successful result therefore means the items were indexed, not merely
    that the request was accepted.
    """

    def __init__(
        self,
        client: RetailClient,
        transformer: ProductTransformer,
        poll_policy: PollPolicy | None = None,
    ):
        self.client = client
        self.transformer = transformer
        self.poll_policy = poll_policy or PollPolicy()

    async def upsert(self, product: SourceProduct) -> ImportResult:
        return await self.upsert_batch([product])

    async def upsert_batch(self, products: list[SourceProduct]) -> ImportResult:
        product_ids = [p.id for p in products]
        if not products:
            return ImportResult(operation_name="", processed_count=0)

        items = [item.to_wire() for item in self.transformer.transform_many(products)]
        operation = await self.client.import_products(items)
        await self.wait_for_operation(operation["name"], product_ids)

        logger.info(
            "Import operation completed",
            operation=operation["name"],
            processed_count=len(products),
        )
        return ImportResult(
            operation_name=operation["name"],
            processed_count=len(products),
            product_ids=product_ids,
        )

    async def delete(self, product_id: str) -> dict[str, Any]:
        deleted = await self.client.delete_product(product_id)
        if deleted:
            logger.info("Product deleted from catalog", product_id=product_id)
        else:
            logger.info("Product already absent from catalog", product_id=product_id)
        return {"success": True, "productId": product_id, "deleted": deleted}

    async def wait_for_operation(self, name: str, product_ids: list[str]) -> dict[str, Any]:
        """Poll until the operation is done; raise on failure or timeout."""
        policy = self.poll_policy
        logger.debug(
            "Waiting for import operation",
            operation=name,
            max_wait_seconds=policy.max_duration,
        )
        for attempt, delay in enumerate(policy.delays()):
            try:
                operation = await self.client.get_operation(name)
            except UpstreamError as exc:
                logger.warning(
                    "Operation status check failed",
                    operation=name,
                    attempt=attempt + 1,
                    error=str(exc),
                )
            else:
                if operation.get("done"):
                    self._raise_for_failure(operation, name, product_ids)
                    return operation
            if attempt + 1 < policy.max_attempts:
                await policy.sleep(delay)

        logger.error("Import operation timed out", operation=name, attempts=policy.max_attempts)
        raise ImportOperationTimeout(
            operation_name=name, attempts=policy.max_attempts, product_ids=product_ids
        )

    @staticmethod
    def _raise_for_failure(
        operation: dict[str, Any], name: str, product_ids: list[str]
    ) -> None:
        error = operation.get("error")
        if error:
            reason = error.get("message") if isinstance(error, dict) else str(error)
            raise ImportOperationFailed(
                reason or str(error), operation_name=name, product_ids=product_ids
            )

        samples = (operation.get("response") or {}).get("errorSamples") or []
        if samples:
            details = "; ".join(f"{s.get('code')}: {s.get('message')}" for s in samples)
            raise ImportOperationFailed(
                f"Import errors: {details}",
                operation_name=name,
                product_ids=product_ids,
                error_samples=samples,
            )

        failure_count = int((operation.get("metadata") or {}).get("failureCount") or 0)
        if failure_count > 0:
            raise ImportOperationFailed(
                f"{failure_count} items failed to import",
                operation_name=name,
                product_ids=product_ids,
            )
