"""Incremental sync endpoints: webhook deliveries and manual product sync."""

from typing import Annotated, Any, Literal

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from catalog_sync.api.dependencies import error_response, get_container
from catalog_sync.container import SyncContainer

logger = structlog.get_logger()

router = APIRouter()


class SyncResponse(BaseModel):
    success: bool = True
    message: str
    data: dict[str, Any]


class ManualSyncRequest(BaseModel):
    action: Literal["upsert", "delete"] = "upsert"


@router.post("/deltaSync", response_model=SyncResponse)
async def delta_sync(
    request: Request,
    container: Annotated[SyncContainer, Depends(get_container)],
):
    """
    Handle one webhook delivery.

    Accepts direct JSON, ``{"data": ...}``, Pub/Sub push and CloudEvents
    bodies. Deliveries that cannot be classified are acknowledged with
    action ``ignored``; only unexpected failures return 500.
    """
    body = await request.body()
    try:
        result = await container.dispatcher.handle(body)
    except Exception as e:
        logger.error("Delta sync failed", error=str(e))
        return error_response("Delta sync failed", e)
    return SyncResponse(message="Message processed successfully", data=result)


@router.post("/sync/{product_id}", response_model=SyncResponse)
async def manual_sync(
    product_id: str,
    container: Annotated[SyncContainer, Depends(get_container)],
    body: ManualSyncRequest | None = None,
):
    """Upsert or delete a single product on demand."""
    action = (body or ManualSyncRequest()).action
    logger.info("Manual sync requested", product_id=product_id, action=action)
    try:
        result = await container.product_sync.sync_product(product_id, action)
    except Exception as e:
        logger.error("Manual sync failed", product_id=product_id, error=str(e))
        return error_response("Manual sync failed", e)
    return SyncResponse(message="Manual sync completed successfully", data=result)
