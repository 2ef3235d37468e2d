"""Base model class with common fields for all models."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declared_attr

from catalog_sync.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored by the catalog tables."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel(Base):
    """Abstract base model with common fields."""

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @declared_attr
    def __tablename__(cls):
        """Generate table name from class name."""
        return cls.__name__.lower() + "s"

    def __repr__(self):
        """Default string representation."""
        if hasattr(self, "id") and self.id is not None:
            return f"<{self.__class__.__name__}(id={self.id})>"
        else:
            return f"<{self.__class__.__name__}>"

    def to_dict(self):
        """Convert model to dictionary."""
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}
