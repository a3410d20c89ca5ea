"""Business logic services."""

from catalog_sync.services.catalog_reader import CatalogReader
from catalog_sync.services.catalog_writer import CatalogWriter
from catalog_sync.services.dispatcher import EventDispatcher, ProductSyncService
from catalog_sync.services.full_sync import FullSyncService
from catalog_sync.services.polling import PollPolicy
from catalog_sync.services.subscriptions import SubscriptionManager
from catalog_sync.services.transformer import ProductTransformer

__all__ = [
    "CatalogReader",
    "CatalogWriter",
    "EventDispatcher",
    "FullSyncService",
    "PollPolicy",
    "ProductSyncService",
    "ProductTransformer",
    "SubscriptionManager",
]
