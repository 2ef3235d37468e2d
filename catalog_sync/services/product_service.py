"""Product service for identity resolution and catalog reads."""

import json
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from catalog_sync.models.product import Product
from catalog_sync.models.variant import ProductVariant
from catalog_sync.schemas.catalog import NormalizedProduct
from catalog_sync.services.base import BaseService
from catalog_sync.utils.logger import logger


class ProductService(BaseService[Product]):
    """
    Service for managing products in the catalog.

    Provides specialized methods for product management including:
    - Resolving an incoming record to a stored product within its source
    - Inserting or updating a product from a normalized record
    - Searching and loading products with their children
    """

    def __init__(self):
        """Initialize product service."""
        super().__init__(Product)

    def find_by_external_id(self, db: Session, source: str, external_id: str) -> Optional[Product]:
        """
        Find a product by its supplier ID within one source.

        Args:
            db: Database session
            source: Supplier tag
            external_id: Supplier product ID

        Returns:
            Product instance or None if not found
        """
        return (
            db.query(Product)
            .filter(Product.source == source, Product.external_id == external_id)
            .order_by(Product.id)
            .first()
        )

    def find_by_product_code(self, db: Session, source: str, product_code: str) -> Optional[Product]:
        """
        Find a product by its supplier code within one source.

        Args:
            db: Database session
            source: Supplier tag
            product_code: Supplier product code

        Returns:
            Product instance or None if not found
        """
        return (
            db.query(Product)
            .filter(Product.source == source, Product.product_code == product_code)
            .order_by(Product.id)
            .first()
        )

    def resolve_existing(
        self, db: Session, normalized: NormalizedProduct, source: Optional[str] = None
    ) -> Optional[Product]:
        """
        Find the stored product an incoming record corresponds to.

        The external ID is tried first, then the product code. Both lookups
        are scoped to the record's source, so equal codes from different
        suppliers never match.

        Args:
            db: Database session
            normalized: Normalized incoming product
            source: Supplier tag, defaults to the record's own

        Returns:
            Existing product or None when the record is new
        """
        source = source or normalized.source
        try:
            if normalized.external_id:
                existing = self.find_by_external_id(db, source, normalized.external_id)
                if existing:
                    return existing
            if normalized.product_code:
                return self.find_by_product_code(db, source, normalized.product_code)
            return None
        except Exception as e:
            logger.error(f"Error resolving product {normalized.identifying_code} ({source}): {e}")
            raise

    def upsert(self, db: Session, normalized: NormalizedProduct) -> Tuple[Product, bool]:
        """
        Insert a new product or overwrite the matched one, without committing.

        Args:
            db: Database session
            normalized: Normalized incoming product

        Returns:
            Tuple of (product, created)
        """
        return self.save(db, normalized, self.resolve_existing(db, normalized))

    def save(
        self, db: Session, normalized: NormalizedProduct, existing: Optional[Product]
    ) -> Tuple[Product, bool]:
        """
        Write a normalized product onto an already resolved match.

        Every column is overwritten from the incoming record, so fields the
        supplier stopped sending become None.

        Args:
            db: Database session
            normalized: Normalized incoming product
            existing: Result of ``resolve_existing``

        Returns:
            Tuple of (product, created)
        """
        values = self.to_columns(normalized)
        if existing:
            product = self.update(db, existing, values, commit=False)
            logger.debug(f"Matched {normalized.source} product {normalized.identifying_code} -> {product.id}")
            return product, False

        product = self.create(db, values, commit=False)
        logger.debug(f"New {normalized.source} product {normalized.identifying_code} -> {product.id}")
        return product, True

    @staticmethod
    def to_columns(normalized: NormalizedProduct) -> Dict[str, Any]:
        """Map a normalized product onto Product column values."""
        values = normalized.model_dump(exclude={"image_urls", "price_tiers"})
        values["image_urls"] = json.dumps(normalized.image_urls) if normalized.image_urls else None
        values["price_tiers"] = (
            json.dumps([tier.model_dump() for tier in normalized.price_tiers])
            if normalized.price_tiers
            else None
        )
        return values

    def search_products(
        self,
        db: Session,
        source: Optional[str] = None,
        search_term: Optional[str] = None,
        brand: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Product]:
        """
        Search products with optional filters.

        Args:
            db: Database session
            source: Filter by supplier tag
            search_term: Search term for name, product code or description
            brand: Filter by brand
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of matching products
        """
        try:
            query = db.query(Product)

            if source:
                query = query.filter(Product.source == source)

            if brand:
                query = query.filter(Product.brand == brand)

            if search_term:
                search_pattern = f"%{search_term}%"
                query = query.filter(
                    or_(
                        Product.name.ilike(search_pattern),
                        Product.product_code.ilike(search_pattern),
                        Product.description.ilike(search_pattern),
                    )
                )

            return query.order_by(Product.id).offset(skip).limit(limit).all()

        except Exception as e:
            logger.error(f"Error searching products: {e}")
            raise

    def get_with_children(self, db: Session, product_id: int) -> Optional[Dict[str, Any]]:
        """
        Load a product grouped with its variants and assets.

        Args:
            db: Database session
            product_id: Product ID

        Returns:
            Dictionary with ``product``, ``variants`` (each a dict holding
            the variant and its ``assets``) and ``master_assets``, or None
        """
        product = (
            db.query(Product)
            .options(
                selectinload(Product.variants).selectinload(ProductVariant.digital_assets),
                selectinload(Product.digital_assets),
            )
            .filter(Product.id == product_id)
            .first()
        )
        if not product:
            return None

        return {
            "product": product,
            "variants": [
                {"variant": variant, "assets": list(variant.digital_assets)}
                for variant in product.variants
            ],
            "master_assets": [
                asset for asset in product.digital_assets if asset.variant_id is None
            ],
        }

    def get_brands(self, db: Session, source: Optional[str] = None) -> List[str]:
        """
        Get list of unique brands.

        Args:
            db: Database session
            source: Optional supplier tag

        Returns:
            List of brand names
        """
        try:
            query = db.query(Product.brand).filter(Product.brand.isnot(None))
            if source:
                query = query.filter(Product.source == source)
            return [brand[0] for brand in query.distinct().order_by(Product.brand).all()]
        except Exception as e:
            logger.error(f"Error fetching brands: {e}")
            raise
