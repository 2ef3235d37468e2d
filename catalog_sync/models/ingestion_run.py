"""IngestionRun model recording each supplier sync."""

import json

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from catalog_sync.models.base import BaseModel, utcnow
from catalog_sync.models.enums import IngestionRunStatus


class IngestionRun(BaseModel):
    """
    Outcome of one ingestion run for one supplier.

    Attributes:
        source: Supplier tag
        status: running, completed or failed
        total_records: Records considered after the limit was applied
        saved_count / skipped_count / error_count: Per-outcome counters
        error_message: Supplier-level failure (feed fetch)
        details: JSON list of the first error and skip details
    """

    __tablename__ = "ingestion_runs"

    source = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default=IngestionRunStatus.RUNNING.value)
    started_at = Column(DateTime, nullable=False, default=utcnow)
    finished_at = Column(DateTime, nullable=True)
    total_records = Column(Integer, nullable=False, default=0)
    saved_count = Column(Integer, nullable=False, default=0)
    skipped_count = Column(Integer, nullable=False, default=0)
    error_count = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    details = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_ingestion_run_source", "source"),
    )

    def finish(self, status: IngestionRunStatus, details=None, error_message=None):
        """Close the run with its final status."""
        self.status = status.value
        self.finished_at = utcnow()
        self.error_message = error_message
        if details is not None:
            self.details = json.dumps(details, default=str)

    def __repr__(self):
        """String representation of IngestionRun."""
        return f"<IngestionRun(id={self.id}, source='{self.source}', status='{self.status}')>"
