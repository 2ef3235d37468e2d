"""Base service class with common functionality."""

from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_sync.models.base import BaseModel
from catalog_sync.utils.logger import logger

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseService(Generic[ModelType]):
    """
    Base service class providing common CRUD operations.

    Write methods commit by default. Pass ``commit=False`` to only flush,
    leaving the transaction to the caller (the ingestion pipeline commits
    once per record).
    """

    def __init__(self, model: Type[ModelType]):
        """
        Initialize base service.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model
        self.model_name = model.__name__.lower()

    def create(self, db: Session, obj_in: Dict[str, Any], commit: bool = True) -> ModelType:
        """
        Create a new record.

        Args:
            db: Database session
            obj_in: Dictionary with creation data
            commit: Commit the transaction, otherwise only flush

        Returns:
            Created model instance
        """
        try:
            db_obj = self.model(**obj_in)
            db.add(db_obj)
            db.flush()  # Flush to get the ID without committing

            if commit:
                db.commit()
                db.refresh(db_obj)
                logger.info(f"Created {self.model_name} with id {db_obj.id}")
            return db_obj

        except SQLAlchemyError as e:
            if commit:
                db.rollback()
            logger.error(f"Error creating {self.model_name}: {e}")
            raise

    def update(
        self,
        db: Session,
        db_obj: ModelType,
        obj_in: Dict[str, Any],
        commit: bool = True,
    ) -> ModelType:
        """
        Update an existing record.

        Args:
            db: Database session
            db_obj: Existing model instance
            obj_in: Dictionary with update data
            commit: Commit the transaction, otherwise only flush

        Returns:
            Updated model instance
        """
        try:
            for field, value in obj_in.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            db.flush()

            if commit:
                db.commit()
                db.refresh(db_obj)
                logger.info(f"Updated {self.model_name} with id {db_obj.id}")
            return db_obj

        except SQLAlchemyError as e:
            if commit:
                db.rollback()
            logger.error(f"Error updating {self.model_name}: {e}")
            raise

    def count(self, db: Session, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Count records with optional filtering.

        Args:
            db: Database session
            filters: Optional equality filters

        Returns:
            Number of records
        """
        try:
            return self._filtered(db, filters).count()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model_name} records: {e}")
            raise

    def _filtered(self, db: Session, filters: Optional[Dict[str, Any]]):
        query = db.query(self.model)
        if filters:
            for key, value in filters.items():
                if hasattr(self.model, key):
                    query = query.filter(getattr(self.model, key) == value)
        return query
