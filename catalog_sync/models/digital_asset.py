"""DigitalAsset model for product images and documents."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from catalog_sync.models.base import BaseModel
from catalog_sync.models.enums import AssetType


class DigitalAsset(BaseModel):
    """
    Image or document attached to a product, optionally through a variant.

    An asset with no ``variant_id`` is a master asset of the product.

    Attributes:
        product_id: Owning product
        variant_id: Owning variant row, None for master assets
        url: Asset URL (required)
        url_high_res: High resolution URL for images
        type: "image" or "document"
        subtype: Supplier tag (e.g., "item_picture_front")
    """

    __tablename__ = "digital_assets"

    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    variant_id = Column(
        Integer, ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=True
    )
    url = Column(Text, nullable=False)
    url_high_res = Column(Text, nullable=True)
    type = Column(String(20), nullable=False)
    subtype = Column(String(100), nullable=True)

    # Relationships
    product = relationship("Product", back_populates="digital_assets")
    variant = relationship("ProductVariant", back_populates="digital_assets")

    __table_args__ = (
        Index("idx_digital_asset_product_id", "product_id"),
        Index("idx_digital_asset_variant_id", "variant_id"),
    )

    @validates("url")
    def validate_url(self, key, value):
        """Validate the asset URL is present."""
        if not value or not value.strip():
            raise ValueError("url cannot be empty")
        return value.strip()

    @validates("type")
    def validate_type(self, key, value):
        """Validate the asset type is a known one."""
        if isinstance(value, AssetType):
            return value.value
        if value not in {t.value for t in AssetType}:
            raise ValueError(f"Unknown asset type: {value}")
        return value

    @property
    def is_master(self):
        """True when attached to the product directly."""
        return self.variant_id is None

    def __repr__(self):
        """String representation of DigitalAsset."""
        return f"<DigitalAsset(id={self.id}, product_id={self.product_id}, variant_id={self.variant_id}, type='{self.type}')>"
