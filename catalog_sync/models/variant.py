"""ProductVariant model for supplier SKU/color/size instances."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship, validates

from catalog_sync.models.base import BaseModel


class ProductVariant(BaseModel):
    """
    A specific SKU of a product, owned by it and deleted with it.

    Variants are replaced wholesale every time the parent product is
    re-ingested.

    Attributes:
        product_id: Foreign key to parent product
        variant_id: Supplier-assigned variant identifier (e.g., "10134325")
        sku: Supplier SKU (e.g., "AR1249-16")
        gtin: Barcode (e.g., "8719941007840")
    """

    __tablename__ = "product_variants"

    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    variant_id = Column(String(100), nullable=False)
    sku = Column(String(100), nullable=True)
    release_date = Column(DateTime, nullable=True)
    discontinued_date = Column(DateTime, nullable=True)
    product_proposition_category = Column(String(100), nullable=True)
    category_level1 = Column(String(200), nullable=True)
    category_level2 = Column(String(200), nullable=True)
    category_level3 = Column(String(200), nullable=True)
    color_description = Column(String(100), nullable=True)
    color_group = Column(String(100), nullable=True)
    color_code = Column(String(50), nullable=True)
    pms_color = Column(String(50), nullable=True)
    plc_status = Column(String(50), nullable=True)
    plc_status_description = Column(String(100), nullable=True)
    gtin = Column(String(50), nullable=True)

    # Relationships
    product = relationship("Product", back_populates="variants")
    digital_assets = relationship(
        "DigitalAsset", back_populates="variant", order_by="DigitalAsset.id"
    )

    __table_args__ = (
        Index("idx_product_variant_product_id", "product_id"),
    )

    @validates("variant_id")
    def validate_variant_id(self, key, value):
        """A variant is only stored with a supplier identifier."""
        if value is None or not str(value).strip():
            raise ValueError("variant_id cannot be empty")
        return str(value).strip()

    def __repr__(self):
        """String representation of ProductVariant."""
        return f"<ProductVariant(id={self.id}, product_id={self.product_id}, variant_id='{self.variant_id}', sku='{self.sku}')>"
