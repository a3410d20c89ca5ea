"""Service wiring.

Everything is built once from an explicit ``Settings`` instance; no service
reads the environment on its own.
"""

from dataclasses import dataclass

import httpx
import redis.asyncio as aioredis
import structlog

from catalog_sync.config import Settings
from catalog_sync.exceptions import ConfigurationError
from catalog_sync.infrastructure.auth import (
    DisabledTokenProvider,
    TokenProvider,
    build_commercetools_token_provider,
    build_retail_token_provider,
)
from catalog_sync.infrastructure.commercetools import CommercetoolsClient
from catalog_sync.infrastructure.redis import EventVersionStore, connect_redis
from catalog_sync.infrastructure.retail import RetailClient
from catalog_sync.services import (
    CatalogReader,
    CatalogWriter,
    EventDispatcher,
    FullSyncService,
    PollPolicy,
    ProductSyncService,
    ProductTransformer,
    SubscriptionManager,
)

logger = structlog.get_logger()


@dataclass
class SyncContainer:
    settings: Settings
    commercetools: CommercetoolsClient
    retail: RetailClient
    reader: CatalogReader
    writer: CatalogWriter
    full_sync: FullSyncService
    product_sync: ProductSyncService
    dispatcher: EventDispatcher
    subscriptions: SubscriptionManager
    redis: aioredis.Redis | None = None

    async def aclose(self) -> None:
        await self.commercetools.aclose()
        await self.retail.aclose()
        if self.redis is not None:
            await self.redis.aclose()


def _token_provider(settings: Settings, build, name: str) -> TokenProvider:
    try:
        return build()
    except ConfigurationError as exc:
        if not settings.allow_missing_credentials:
            raise
        logger.warning("Credentials missing, calls will fail", upstream=name, error=exc.message)
        return DisabledTokenProvider(exc)


async def build_container(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    commercetools_token_provider: TokenProvider | None = None,
    retail_token_provider: TokenProvider | None = None,
) -> SyncContainer:
    """
    Build every service from settings.

    Raises ``ConfigurationError`` for missing or malformed credentials unless
    ``ALLOW_MISSING_CREDENTIALS`` is set. ``transport`` and the token
    providers can be injected to run against fakes.
    """
    ctp_tokens = commercetools_token_provider or _token_provider(
        settings,
        lambda: build_commercetools_token_provider(settings, transport),
        "commercetools",
    )
    retail_tokens = retail_token_provider or _token_provider(
        settings, lambda: build_retail_token_provider(settings), "retail"
    )

    commercetools = CommercetoolsClient(
        settings.ctp_api_host,
        settings.ctp_project_key,
        ctp_tokens,
        timeout=settings.http_timeout_seconds,
        transport=transport,
    )
    retail = RetailClient(
        settings.retail_api_base_url,
        settings.branch_path,
        retail_tokens,
        timeout=settings.http_timeout_seconds,
        transport=transport,
    )

    reader = CatalogReader(
        commercetools,
        mode=settings.catalog_read_mode,
        locales=settings.locale_preferences,
        rest_page_size=settings.rest_page_size,
        graphql_page_size=settings.graphql_page_size,
    )
    writer = CatalogWriter(
        retail,
        ProductTransformer.from_settings(settings),
        PollPolicy.from_settings(settings),
    )
    product_sync = ProductSyncService(reader, writer)

    redis_client = None
    version_store = None
    if settings.event_version_guard_enabled:
        redis_client = await connect_redis(settings)
        version_store = EventVersionStore(redis_client, settings.event_version_ttl_seconds)

    logger.info(
        "Services initialized",
        service=settings.service_name,
        read_mode=settings.catalog_read_mode,
        version_guard=version_store is not None and redis_client is not None,
    )
    return SyncContainer(
        settings=settings,
        commercetools=commercetools,
        retail=retail,
        reader=reader,
        writer=writer,
        full_sync=FullSyncService.from_settings(settings, reader, writer),
        product_sync=product_sync,
        dispatcher=EventDispatcher(product_sync, version_store),
        subscriptions=SubscriptionManager(commercetools, settings),
        redis=redis_client,
    )
