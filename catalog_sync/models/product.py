"""Product model for the canonical supplier catalog."""

import json

from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from catalog_sync.models.base import BaseModel

NAME_MAX_LENGTH = 255


class Product(BaseModel):
    """
    Canonical catalog entry produced from one supplier record.

    Identity inside the catalog is the integer ``id``. ``external_id`` and
    ``product_code`` are the supplier's alternate keys and are only unique
    within one ``source``.

    Attributes:
        source: Supplier tag (e.g., "midocean", "xd-connects")
        external_id: Supplier product ID (e.g., Midocean master ID "40000011")
        product_code: Supplier product code (e.g., "AR1249", "P436.979")
        name: Display name, never empty, at most 255 characters
        raw_data: Serialized supplier record; over the size cap it is stored as
            {"truncated": true, "head": <start of the record JSON>}
    """

    __tablename__ = "products"

    # Identification
    source = Column(String(50), nullable=True)
    external_id = Column(String(100), nullable=True)
    product_code = Column(String(100), nullable=True)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    brand = Column(String(100), nullable=True)

    # Category hierarchy
    category = Column(String(200), nullable=True)
    sub_category = Column(String(200), nullable=True)
    category_code = Column(String(100), nullable=True)
    product_class = Column(String(200), nullable=True)

    # Product details
    material = Column(String(255), nullable=True)
    color = Column(String(100), nullable=True)

    # Dimensions
    length = Column(Float, nullable=True)
    length_unit = Column(String(20), nullable=True)
    width = Column(Float, nullable=True)
    width_unit = Column(String(20), nullable=True)
    height = Column(Float, nullable=True)
    height_unit = Column(String(20), nullable=True)
    dimensions = Column(String(255), nullable=True)
    volume = Column(Float, nullable=True)
    volume_unit = Column(String(20), nullable=True)

    # Weight
    weight = Column(Float, nullable=True)
    gross_weight = Column(Float, nullable=True)
    gross_weight_unit = Column(String(20), nullable=True)
    net_weight = Column(Float, nullable=True)
    net_weight_unit = Column(String(20), nullable=True)

    # Carton packaging
    inner_carton_quantity = Column(Integer, nullable=True)
    outer_carton_quantity = Column(Integer, nullable=True)
    carton_length = Column(Float, nullable=True)
    carton_length_unit = Column(String(20), nullable=True)
    carton_width = Column(Float, nullable=True)
    carton_width_unit = Column(String(20), nullable=True)
    carton_height = Column(Float, nullable=True)
    carton_height_unit = Column(String(20), nullable=True)
    carton_volume = Column(Float, nullable=True)
    carton_volume_unit = Column(String(20), nullable=True)
    carton_gross_weight = Column(Float, nullable=True)
    carton_gross_weight_unit = Column(String(20), nullable=True)

    # Descriptive text
    short_description = Column(Text, nullable=True)
    long_description = Column(Text, nullable=True)
    packaging_after_printing = Column(String(255), nullable=True)
    printable = Column(String(20), nullable=True)
    country_of_origin = Column(String(100), nullable=True)
    ean_code = Column(String(50), nullable=True)
    commodity_code = Column(String(50), nullable=True)

    # Supplier master fields
    master_code = Column(String(100), nullable=True)
    master_id = Column(String(100), nullable=True)
    type_of_products = Column(String(100), nullable=True)
    number_of_print_positions = Column(String(20), nullable=True)
    product_name = Column(String(255), nullable=True)
    product_life_cycle = Column(String(100), nullable=True)

    # Images
    image_url = Column(Text, nullable=True)
    image_urls = Column(Text, nullable=True)  # JSON list of image URLs

    # Pricing as delivered by the feed
    price = Column(Float, nullable=True)
    currency = Column(String(10), nullable=True)
    price_tiers = Column(Text, nullable=True)  # JSON list of {"quantity", "price"}

    # Sustainability flags
    eco = Column(Boolean, nullable=True)
    pvc_free = Column(Boolean, nullable=True)

    source_timestamp = Column(DateTime, nullable=True)
    raw_data = Column(Text, nullable=True)

    # Relationships
    variants = relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductVariant.id",
    )
    digital_assets = relationship(
        "DigitalAsset",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="DigitalAsset.id",
    )

    # Identity lookups are always scoped to a source
    __table_args__ = (
        Index("idx_product_source_external_id", "source", "external_id"),
        Index("idx_product_source_product_code", "source", "product_code"),
        Index("idx_product_name", "name"),
    )

    @validates("name")
    def validate_name(self, key, value):
        """Validate the product name is not empty."""
        if not value or not value.strip():
            raise ValueError("name cannot be empty")
        return value.strip()

    def __repr__(self):
        """String representation of Product."""
        return f"<Product(id={self.id}, source='{self.source}', code='{self.product_code}', name='{self.name}')>"

    @property
    def master_assets(self):
        """Digital assets attached to the product rather than a variant."""
        return [asset for asset in self.digital_assets if asset.variant_id is None]

    def get_image_urls(self):
        """Decode the stored image URL list."""
        if not self.image_urls:
            return []
        try:
            return json.loads(self.image_urls)
        except json.JSONDecodeError:
            return []

    def get_price_tiers(self):
        """Decode the stored price tiers."""
        if not self.price_tiers:
            return []
        try:
            return json.loads(self.price_tiers)
        except json.JSONDecodeError:
            return []
