"""Services for the catalog sync engine."""

from .base import BaseService
from .product_service import ProductService
from .child_sync_service import ChildCollectionSynchronizer, ChildSyncResult
from .feed_client import (
    FeedClient,
    MidoceanFeedClient,
    XDConnectsFeedClient,
    build_feed_clients,
)
from .ingestion_service import IngestionService
from .quote_service import DEFAULT_PROVIDERS, QuoteService, QuoteSimulationEngine

__all__ = [
    "BaseService",
    "ProductService",
    "ChildCollectionSynchronizer",
    "ChildSyncResult",
    "FeedClient",
    "MidoceanFeedClient",
    "XDConnectsFeedClient",
    "build_feed_clients",
    "IngestionService",
    "DEFAULT_PROVIDERS",
    "QuoteService",
    "QuoteSimulationEngine",
]
