"""Pydantic schemas for canonical records, reports and quotes."""

from catalog_sync.schemas.catalog import (
    CanonicalRecord,
    NormalizationDegradation,
    NormalizedAsset,
    NormalizedProduct,
    NormalizedVariant,
    PriceTier,
)
from catalog_sync.schemas.ingestion import IngestionReport, RecordResult, SyncSummary
from catalog_sync.schemas.quote import ProviderProfile, Quote

__all__ = [
    "CanonicalRecord",
    "NormalizationDegradation",
    "NormalizedAsset",
    "NormalizedProduct",
    "NormalizedVariant",
    "PriceTier",
    "IngestionReport",
    "RecordResult",
    "SyncSummary",
    "ProviderProfile",
    "Quote",
]
