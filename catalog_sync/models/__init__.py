"""Database models for the catalog sync engine."""

# Import all models
from catalog_sync.models.base import BaseModel
from catalog_sync.models.enums import (
    SupplierSource,
    AssetType,
    RecordState,
    RecordOutcome,
    IngestionRunStatus,
    RequestStatus,
)
from catalog_sync.models.product import Product
from catalog_sync.models.variant import ProductVariant
from catalog_sync.models.digital_asset import DigitalAsset
from catalog_sync.models.quote import ProductRequest, ProviderQuote
from catalog_sync.models.ingestion_run import IngestionRun

# Export all models and enums
__all__ = [
    # Base
    "BaseModel",
    # Enums
    "SupplierSource",
    "AssetType",
    "RecordState",
    "RecordOutcome",
    "IngestionRunStatus",
    "RequestStatus",
    # Models
    "Product",
    "ProductVariant",
    "DigitalAsset",
    "ProductRequest",
    "ProviderQuote",
    "IngestionRun",
]
