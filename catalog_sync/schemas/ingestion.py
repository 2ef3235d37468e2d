"""Ingestion report schemas."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from catalog_sync.models.enums import RecordOutcome, RecordState


class RecordResult(BaseModel):
    """Outcome of one raw record."""

    code: str
    outcome: RecordOutcome
    state: RecordState
    product_id: Optional[int] = None
    created: Optional[bool] = None
    saved_variants: int = 0
    saved_assets: int = 0
    message: Optional[str] = None
    child_errors: List[str] = Field(default_factory=list)
    degradations: List[str] = Field(default_factory=list)


class IngestionReport(BaseModel):
    """Counts and first error details for one supplier run."""

    source: str
    total: int = 0
    saved_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    created_count: int = 0
    updated_count: int = 0
    degraded_count: int = 0
    details: List[RecordResult] = Field(default_factory=list)
    feed_error: Optional[str] = None
    run_id: Optional[int] = None

    @property
    def failed(self) -> bool:
        """True when the supplier feed itself could not be read."""
        return self.feed_error is not None


class SyncSummary(BaseModel):
    """Aggregate result of syncing several suppliers."""

    imported_count: int = 0
    error_count: int = 0
    per_supplier: Dict[str, IngestionReport] = Field(default_factory=dict)

    @classmethod
    def from_reports(cls, reports: List[IngestionReport]) -> "SyncSummary":
        """Combine per-supplier reports."""
        summary = cls()
        for report in reports:
            summary.per_supplier[report.source] = report
            summary.imported_count += report.saved_count
            summary.error_count += report.error_count + (1 if report.failed else 0)
        return summary
