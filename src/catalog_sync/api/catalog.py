"""Catalog endpoints: product counts and full sync."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from catalog_sync.api.dependencies import error_response, get_container
from catalog_sync.container import SyncContainer
from catalog_sync.models import BatchError, CamelModel, FullSyncResult

logger = structlog.get_logger()

router = APIRouter()


# =============================================================================
# Models
# =============================================================================


class ProductCountsResponse(BaseModel):
    """Source catalog product counts by status."""

    total: int
    published: int
    staged: int
    draft: int


class FullSyncData(CamelModel):
    total_products: int
    processed_count: int
    error_count: int
    duration: str
    errors: list[BatchError] | None = None

    @classmethod
    def from_result(cls, result: FullSyncResult) -> "FullSyncData":
        return cls(
            total_products=result.total_products,
            processed_count=result.processed_count,
            error_count=result.error_count,
            duration=f"{result.elapsed_ms}ms",
            errors=result.errors or None,
        )


class FullSyncResponse(BaseModel):
    success: bool = True
    message: str = "Full sync completed successfully"
    data: FullSyncData


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/productCounts", response_model=ProductCountsResponse)
async def product_counts(
    container: Annotated[SyncContainer, Depends(get_container)],
):
    """Count products in the source catalog."""
    try:
        counts = await container.reader.product_counts()
    except Exception as e:
        logger.error("Product count failed", error=str(e))
        return error_response("Failed to get product counts", e)
    return ProductCountsResponse(**counts)


@router.post(
    "/fullSync",
    response_model=FullSyncResponse,
    response_model_exclude_none=True,
)
async def full_sync(
    container: Annotated[SyncContainer, Depends(get_container)],
):
    """
    Run a full catalog sync.

    Runs synchronously: the response is sent once every batch has been
    imported or has failed. Failed batches are listed in ``errors``.
    """
    try:
        result = await container.full_sync.run_full_sync()
    except Exception as e:
        logger.error("Full sync failed", error=str(e))
        return error_response("Full sync failed", e)
    return FullSyncResponse(data=FullSyncData.from_result(result))
