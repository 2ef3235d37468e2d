"""Exception types raised by the ingestion engine."""

from typing import Optional


class CatalogSyncError(Exception):
    """Base class for catalog sync errors."""


class ConfigurationError(CatalogSyncError):
    """Raised when the store or a feed is misconfigured."""


class UnknownSupplierError(CatalogSyncError):
    """Raised for a supplier tag with no registered strategy or client."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Unknown supplier: {source}")


class FeedFetchError(CatalogSyncError):
    """
    The upstream supplier feed was unreachable or answered with an error.

    Fatal to the run of that supplier only.
    """

    def __init__(self, source: str, message: str, status_code: Optional[int] = None):
        self.source = source
        self.status_code = status_code
        super().__init__(message)


class RecordPersistenceError(CatalogSyncError):
    """A single record could not be inserted or updated."""

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(f"{code}: {message}")


class ChildSyncError(CatalogSyncError):
    """A variant or digital asset of a product failed to save."""

    def __init__(self, kind: str, identifier: Optional[str], message: str):
        self.kind = kind
        self.identifier = identifier
        self.message = message
        super().__init__(f"{kind} {identifier or '<unidentified>'}: {message}")
