"""Enum types for database models."""

import enum


class SupplierSource(str, enum.Enum):
    """Supplier feed tags; a product's source scopes its identity keys."""

    MIDOCEAN = "midocean"
    XD_CONNECTS = "xd-connects"


class AssetType(str, enum.Enum):
    """Digital asset type enumeration."""

    IMAGE = "image"
    DOCUMENT = "document"


class RecordState(str, enum.Enum):
    """Lifecycle of one raw record inside an ingestion run."""

    FETCHED = "fetched"
    NORMALIZED = "normalized"
    MATCHED = "matched"
    NEW = "new"
    PERSISTED = "persisted"
    CHILDREN_SYNCHRONIZED = "children_synchronized"
    DONE = "done"
    FAILED = "failed"


class RecordOutcome(str, enum.Enum):
    """Final outcome of a record, as counted in the ingestion report."""

    SAVED = "saved"
    SKIPPED = "skipped"
    ERRORED = "errored"


class IngestionRunStatus(str, enum.Enum):
    """Ingestion run status enumeration."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RequestStatus(str, enum.Enum):
    """Product request status enumeration."""

    PENDING = "pending"
