"""Router that aggregates all endpoint routers."""

from fastapi import APIRouter

from catalog_sync.api import catalog, events, health

api_router = APIRouter()

api_router.include_router(
    health.router,
    tags=["Health"],
)

api_router.include_router(
    catalog.router,
    tags=["Catalog"],
)

api_router.include_router(
    events.router,
    tags=["Sync"],
)
