"""Canonical record schemas produced by the supplier normalizers."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class NormalizationDegradation(BaseModel):
    """A fallback taken while normalizing; informational, never an error."""

    field: str
    reason: str


class PriceTier(BaseModel):
    """Quantity break as delivered by a feed."""

    quantity: int
    price: float


class NormalizedProduct(BaseModel):
    """Product column values after extraction, coercion and sanitation."""

    source: str
    name: str
    external_id: Optional[str] = None
    product_code: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None

    category: Optional[str] = None
    sub_category: Optional[str] = None
    category_code: Optional[str] = None
    product_class: Optional[str] = None

    material: Optional[str] = None
    color: Optional[str] = None

    length: Optional[float] = None
    length_unit: Optional[str] = None
    width: Optional[float] = None
    width_unit: Optional[str] = None
    height: Optional[float] = None
    height_unit: Optional[str] = None
    dimensions: Optional[str] = None
    volume: Optional[float] = None
    volume_unit: Optional[str] = None

    weight: Optional[float] = None
    gross_weight: Optional[float] = None
    gross_weight_unit: Optional[str] = None
    net_weight: Optional[float] = None
    net_weight_unit: Optional[str] = None

    inner_carton_quantity: Optional[int] = None
    outer_carton_quantity: Optional[int] = None
    carton_length: Optional[float] = None
    carton_length_unit: Optional[str] = None
    carton_width: Optional[float] = None
    carton_width_unit: Optional[str] = None
    carton_height: Optional[float] = None
    carton_height_unit: Optional[str] = None
    carton_volume: Optional[float] = None
    carton_volume_unit: Optional[str] = None
    carton_gross_weight: Optional[float] = None
    carton_gross_weight_unit: Optional[str] = None

    short_description: Optional[str] = None
    long_description: Optional[str] = None
    packaging_after_printing: Optional[str] = None
    printable: Optional[str] = None
    country_of_origin: Optional[str] = None
    ean_code: Optional[str] = None
    commodity_code: Optional[str] = None

    master_code: Optional[str] = None
    master_id: Optional[str] = None
    type_of_products: Optional[str] = None
    number_of_print_positions: Optional[str] = None
    product_name: Optional[str] = None
    product_life_cycle: Optional[str] = None

    image_url: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)

    price: Optional[float] = None
    currency: Optional[str] = None
    price_tiers: List[PriceTier] = Field(default_factory=list)

    eco: Optional[bool] = None
    pvc_free: Optional[bool] = None

    source_timestamp: Optional[datetime] = None
    raw_data: Optional[str] = None

    @property
    def identifying_code(self) -> str:
        """Best-effort code for reports and logs."""
        return self.product_code or self.external_id or "unknown"


class NormalizedVariant(BaseModel):
    """Variant values; ``variant_id`` is the supplier's identifier."""

    variant_id: Optional[str] = None
    sku: Optional[str] = None
    release_date: Optional[datetime] = None
    discontinued_date: Optional[datetime] = None
    product_proposition_category: Optional[str] = None
    category_level1: Optional[str] = None
    category_level2: Optional[str] = None
    category_level3: Optional[str] = None
    color_description: Optional[str] = None
    color_group: Optional[str] = None
    color_code: Optional[str] = None
    pms_color: Optional[str] = None
    plc_status: Optional[str] = None
    plc_status_description: Optional[str] = None
    gtin: Optional[str] = None


class NormalizedAsset(BaseModel):
    """
    Asset values before persistence.

    ``source_variant_id`` is the supplier variant identifier the asset was
    nested under, not a database id; None marks a master asset.
    """

    url: Optional[str] = None
    url_high_res: Optional[str] = None
    type: str
    subtype: Optional[str] = None
    source_variant_id: Optional[str] = None


class CanonicalRecord(BaseModel):
    """Normalized Product/Variants/Assets triple for one raw record."""

    product: NormalizedProduct
    variants: List[NormalizedVariant] = Field(default_factory=list)
    assets: List[NormalizedAsset] = Field(default_factory=list)
    degradations: List[NormalizationDegradation] = Field(default_factory=list)
