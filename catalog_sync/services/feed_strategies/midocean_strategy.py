"""Normalization strategy for the Midocean product feed."""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from catalog_sync.models.enums import AssetType, SupplierSource
from catalog_sync.schemas.catalog import (
    NormalizationDegradation,
    NormalizedAsset,
    NormalizedProduct,
    NormalizedVariant,
)
from catalog_sync.services.feed_strategies.base_strategy import BaseFeedStrategy, FieldSpec
from catalog_sync.utils.coercion import clean_string, first_present

FRONT_PICTURE_SUBTYPES = ("item_picture_front", "itemPictureFront")


def _snake_camel(snake: str) -> Tuple[str, str]:
    head, *rest = snake.split("_")
    return snake, head + "".join(part.capitalize() for part in rest)


def _field(snake: str, kind: str = "string") -> FieldSpec:
    return FieldSpec(_snake_camel(snake), kind)


class MidoceanFeedStrategy(BaseFeedStrategy):
    """
    Midocean master records.

    A record is a master product with nested ``variants``, each carrying its
    own ``digital_assets``, plus master-level ``digital_assets``. Keys arrive
    in snake_case or camelCase depending on the feed version.
    """

    source = SupplierSource.MIDOCEAN.value
    label = "Midocean"

    NAME_KEYS = (
        "product_name", "productName", "ProductName",
        "name", "Name",
        "title", "Title",
        "shortDescription", "short_description", "ShortDescription",
        "displayName", "DisplayName",
    )
    PRODUCT_CODE_KEYS = (
        "master_code", "masterCode",
        "productCode", "ProductCode", "code", "Code", "sku", "SKU",
    )
    EXTERNAL_ID_KEYS = (
        "master_id", "masterId", "masterID",
        "id", "Id", "productId", "ProductId", "externalId", "ExternalId",
    )
    VARIANT_KEYS = ("variants", "Variants")
    ASSET_KEYS = ("digital_assets", "digitalAssets")

    def _define_product_fields(self) -> Dict[str, FieldSpec]:
        """Define Midocean product field keys."""
        return {
            "description": FieldSpec(("long_description", "longDescription", "description")),
            "brand": FieldSpec(("brand", "Brand")),
            "master_code": _field("master_code"),
            "master_id": FieldSpec(("master_id", "masterId", "masterID")),
            "type_of_products": _field("type_of_products"),
            "commodity_code": _field("commodity_code"),
            "number_of_print_positions": _field("number_of_print_positions"),
            "product_name": _field("product_name"),
            "category_code": _field("category_code"),
            "product_class": _field("product_class"),
            # Dimensions
            "length": FieldSpec(("length",), "float"),
            "length_unit": _field("length_unit"),
            "width": FieldSpec(("width",), "float"),
            "width_unit": _field("width_unit"),
            "height": FieldSpec(("height",), "float"),
            "height_unit": _field("height_unit"),
            "dimensions": FieldSpec(("dimensions",)),
            "volume": FieldSpec(("volume",), "float"),
            "volume_unit": _field("volume_unit"),
            # Weight; the plain weight column mirrors net weight
            "gross_weight": _field("gross_weight", "float"),
            "gross_weight_unit": _field("gross_weight_unit"),
            "net_weight": _field("net_weight", "float"),
            "net_weight_unit": _field("net_weight_unit"),
            "weight": _field("net_weight", "float"),
            # Carton
            "inner_carton_quantity": _field("inner_carton_quantity", "int"),
            "outer_carton_quantity": _field("outer_carton_quantity", "int"),
            "carton_length": _field("carton_length", "float"),
            "carton_length_unit": _field("carton_length_unit"),
            "carton_width": _field("carton_width", "float"),
            "carton_width_unit": _field("carton_width_unit"),
            "carton_height": _field("carton_height", "float"),
            "carton_height_unit": _field("carton_height_unit"),
            "carton_volume": _field("carton_volume", "float"),
            "carton_volume_unit": _field("carton_volume_unit"),
            "carton_gross_weight": _field("carton_gross_weight", "float"),
            "carton_gross_weight_unit": _field("carton_gross_weight_unit"),
            # Text
            "short_description": _field("short_description"),
            "long_description": _field("long_description"),
            "material": FieldSpec(("material", "Material")),
            "packaging_after_printing": _field("packaging_after_printing"),
            "printable": FieldSpec(("printable",)),
            "country_of_origin": _field("country_of_origin"),
            "source_timestamp": FieldSpec(("timestamp",), "datetime"),
        }

    def _define_variant_fields(self) -> Dict[str, FieldSpec]:
        """Define Midocean variant field keys."""
        return {
            "variant_id": _field("variant_id"),
            "sku": FieldSpec(("sku", "SKU")),
            "release_date": _field("release_date", "datetime"),
            "discontinued_date": _field("discontinued_date", "datetime"),
            "product_proposition_category": _field("product_proposition_category"),
            "category_level1": _field("category_level1"),
            "category_level2": _field("category_level2"),
            "category_level3": _field("category_level3"),
            "color_description": _field("color_description"),
            "color_group": _field("color_group"),
            "color_code": _field("color_code"),
            "pms_color": _field("pms_color"),
            "plc_status": _field("plc_status"),
            "plc_status_description": _field("plc_status_description"),
            "gtin": FieldSpec(("gtin", "GTIN")),
        }

    def extract_children(
        self, raw: Mapping[str, Any], product: NormalizedProduct
    ) -> Tuple[List[NormalizedVariant], List[NormalizedAsset]]:
        """Walk nested variants and their assets, then master assets."""
        variants: List[NormalizedVariant] = []
        assets: List[NormalizedAsset] = []

        for raw_variant in self._list_at(raw, self.VARIANT_KEYS):
            if not isinstance(raw_variant, Mapping):
                continue
            variant = self.build_variant(raw_variant)
            variants.append(variant)
            for raw_asset in self._list_at(raw_variant, self.ASSET_KEYS):
                if isinstance(raw_asset, Mapping):
                    assets.append(self.build_asset(raw_asset, variant.variant_id, AssetType.IMAGE))

        for raw_asset in self._list_at(raw, self.ASSET_KEYS):
            if isinstance(raw_asset, Mapping):
                assets.append(self.build_asset(raw_asset, None, AssetType.DOCUMENT))

        return variants, assets

    def enrich_product(
        self,
        raw: Mapping[str, Any],
        values: Dict[str, Any],
        variants: List[NormalizedVariant],
        assets: List[NormalizedAsset],
        degradations: List[NormalizationDegradation],
    ) -> None:
        """Pick the main image from the first variant's front picture."""
        values["image_url"] = self._front_picture(raw) or clean_string(
            first_present(raw, ("imageUrl", "image"))
        )

    def _front_picture(self, raw: Mapping[str, Any]) -> Optional[str]:
        raw_variants = self._list_at(raw, self.VARIANT_KEYS)
        if not raw_variants or not isinstance(raw_variants[0], Mapping):
            return None
        for raw_asset in self._list_at(raw_variants[0], self.ASSET_KEYS):
            if not isinstance(raw_asset, Mapping):
                continue
            if raw_asset.get("subtype") in FRONT_PICTURE_SUBTYPES:
                url = clean_string(raw_asset.get("url"))
                if url:
                    return url
        return None

    @staticmethod
    def _list_at(raw: Mapping[str, Any], keys: Tuple[str, ...]) -> List[Any]:
        value = first_present(raw, keys)
        return value if isinstance(value, list) else []
