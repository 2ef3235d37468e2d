"""Full replacement of a product's variants and digital assets."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_sync.exceptions import ChildSyncError
from catalog_sync.models.digital_asset import DigitalAsset
from catalog_sync.models.product import Product
from catalog_sync.models.variant import ProductVariant
from catalog_sync.schemas.catalog import NormalizedAsset, NormalizedVariant
from catalog_sync.utils.logger import logger


@dataclass
class ChildSyncResult:
    """Counts and errors of one synchronization."""

    saved_variants: int = 0
    saved_assets: int = 0
    skipped_variants: int = 0
    skipped_assets: int = 0
    orphaned_assets: int = 0
    errors: List[ChildSyncError] = field(default_factory=list)


class ChildCollectionSynchronizer:
    """
    Replace the variant and asset rows of one product.

    Existing children are deleted and the incoming set is inserted fresh.
    Each insert runs in its own SAVEPOINT so a failing child is dropped
    without touching the parent product or its siblings. The caller owns
    the surrounding transaction.
    """

    def synchronize(
        self,
        db: Session,
        product_id: int,
        variants: Sequence[NormalizedVariant],
        assets: Sequence[NormalizedAsset],
    ) -> ChildSyncResult:
        """
        Replace a product's children.

        Args:
            db: Database session inside the record's transaction
            product_id: Owning product
            variants: Incoming variants
            assets: Incoming assets tagged with supplier variant identifiers

        Returns:
            ChildSyncResult with saved counts and per-child errors
        """
        result = ChildSyncResult()
        self.delete_children(db, product_id)

        variant_ids = self._insert_variants(db, product_id, variants, result)
        self._insert_assets(db, product_id, assets, variant_ids, result)

        logger.debug(
            f"Product {product_id}: saved {result.saved_variants} variants, "
            f"{result.saved_assets} assets ({len(result.errors)} errors)"
        )
        return result

    def delete_children(self, db: Session, product_id: int) -> None:
        """Delete all assets, then all variants, of a product."""
        product = db.get(Product, product_id)
        if product is not None:
            db.expire(product, ["variants", "digital_assets"])

        try:
            with db.begin_nested():
                assets = (
                    db.query(DigitalAsset)
                    .filter(DigitalAsset.product_id == product_id)
                    .delete(synchronize_session="fetch")
                )
                variants = (
                    db.query(ProductVariant)
                    .filter(ProductVariant.product_id == product_id)
                    .delete(synchronize_session="fetch")
                )
            if assets or variants:
                logger.debug(f"Product {product_id}: removed {variants} variants, {assets} assets")
        except SQLAlchemyError as e:
            logger.warning(f"Could not clear children of product {product_id}: {e}")

    def _insert_variants(
        self,
        db: Session,
        product_id: int,
        variants: Sequence[NormalizedVariant],
        result: ChildSyncResult,
    ) -> Dict[str, int]:
        variant_ids: Dict[str, int] = {}
        for variant in variants:
            if not variant.variant_id:
                result.skipped_variants += 1
                logger.warning(
                    f"Product {product_id}: skipping variant without variant id (sku={variant.sku})"
                )
                continue

            try:
                with db.begin_nested():
                    row = ProductVariant(product_id=product_id, **variant.model_dump())
                    db.add(row)
                    db.flush()
            except (SQLAlchemyError, ValueError) as e:
                error = ChildSyncError("variant", variant.variant_id, str(e))
                result.errors.append(error)
                logger.error(f"Product {product_id}: {error}")
                continue

            variant_ids[variant.variant_id] = row.id
            result.saved_variants += 1
        return variant_ids

    def _insert_assets(
        self,
        db: Session,
        product_id: int,
        assets: Sequence[NormalizedAsset],
        variant_ids: Dict[str, int],
        result: ChildSyncResult,
    ) -> None:
        for asset in assets:
            if not asset.url:
                result.skipped_assets += 1
                continue

            variant_id = self._resolve_variant(asset.source_variant_id, variant_ids, result)
            try:
                with db.begin_nested():
                    row = DigitalAsset(
                        product_id=product_id,
                        variant_id=variant_id,
                        url=asset.url,
                        url_high_res=asset.url_high_res,
                        type=asset.type,
                        subtype=asset.subtype,
                    )
                    db.add(row)
                    db.flush()
            except (SQLAlchemyError, ValueError) as e:
                error = ChildSyncError("asset", asset.url, str(e))
                result.errors.append(error)
                logger.error(f"Product {product_id}: {error}")
                continue

            result.saved_assets += 1

    @staticmethod
    def _resolve_variant(
        source_variant_id: Optional[str], variant_ids: Dict[str, int], result: ChildSyncResult
    ) -> Optional[int]:
        """Map a supplier variant id to the new row id; unknown ids become master-level."""
        if source_variant_id is None:
            return None
        variant_id = variant_ids.get(source_variant_id)
        if variant_id is None:
            result.orphaned_assets += 1
            logger.debug(f"Asset for unknown variant {source_variant_id} kept at product level")
        return variant_id
