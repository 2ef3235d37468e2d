"""Normalization strategy for the XD Connects product data feed."""

from typing import Any, Dict, List, Mapping, Tuple

from catalog_sync.models.enums import AssetType, SupplierSource
from catalog_sync.schemas.catalog import (
    NormalizationDegradation,
    NormalizedAsset,
    NormalizedProduct,
    NormalizedVariant,
    PriceTier,
)
from catalog_sync.services.feed_strategies.base_strategy import BaseFeedStrategy, FieldSpec
from catalog_sync.utils.coercion import clean_string, split_urls, to_float, to_int

PRICE_TIER_COUNT = 5

IMAGE_KEYS = (
    ("MainImage", "main_image"),
    ("MainImageNeutral", "main_image_neutral"),
    ("ExtraImage1", "extra_image"),
    ("ExtraImage2", "extra_image"),
    ("ExtraImage3", "extra_image"),
    ("ImagePrint", "image_print"),
)

# Value column -> (unit column, unit)
UNITS = {
    "length": ("length_unit", "cm"),
    "width": ("width_unit", "cm"),
    "height": ("height_unit", "cm"),
    "gross_weight": ("gross_weight_unit", "g"),
    "net_weight": ("net_weight_unit", "g"),
    "carton_length": ("carton_length_unit", "cm"),
    "carton_width": ("carton_width_unit", "cm"),
    "carton_height": ("carton_height_unit", "cm"),
    "carton_gross_weight": ("carton_gross_weight_unit", "kg"),
}


class XDConnectsFeedStrategy(BaseFeedStrategy):
    """
    XD Connects item records.

    One flat PascalCase record per item. The record becomes a product keyed
    by ``ItemCode`` with a single variant for the item itself; the item's
    images hang off that variant.
    """

    source = SupplierSource.XD_CONNECTS.value
    label = "XD Connects"

    NAME_KEYS = ("ItemName", "Name", "ProductName", "Title")
    PRODUCT_CODE_KEYS = ("ItemCode",)
    EXTERNAL_ID_KEYS = ()

    def _define_product_fields(self) -> Dict[str, FieldSpec]:
        """Define XD Connects product field keys."""
        return {
            "master_code": FieldSpec(("ModelCode",)),
            "product_name": FieldSpec(("ItemName",)),
            "description": FieldSpec(("LongDescription",)),
            "long_description": FieldSpec(("LongDescription",)),
            "brand": FieldSpec(("Brand",)),
            "category": FieldSpec(("MainCategory",)),
            "sub_category": FieldSpec(("SubCategory",)),
            "material": FieldSpec(("Material",)),
            "color": FieldSpec(("Color",)),
            "product_life_cycle": FieldSpec(("ProductLifeCycle",)),
            "country_of_origin": FieldSpec(("CountryOfOrigin",)),
            "commodity_code": FieldSpec(("CommodityCode",)),
            "ean_code": FieldSpec(("EANCode",)),
            # Item dimensions in cm, weights in grams
            "length": FieldSpec(("ItemLengthCM",), "float"),
            "width": FieldSpec(("ItemWidthCM",), "float"),
            "height": FieldSpec(("ItemHeightCM",), "float"),
            "dimensions": FieldSpec(("ItemDimensions",)),
            "net_weight": FieldSpec(("ItemWeightNetGr",), "float"),
            "gross_weight": FieldSpec(("ItemWeightGrossGr",), "float"),
            "weight": FieldSpec(("ItemWeightNetGr",), "float"),
            # Outer carton in cm and kg
            "inner_carton_quantity": FieldSpec(("InnerboxQty",), "int"),
            "outer_carton_quantity": FieldSpec(("OuterCartonQty",), "int"),
            "carton_length": FieldSpec(("OuterCartonLengthCM",), "float"),
            "carton_width": FieldSpec(("OuterCartonWidthCM",), "float"),
            "carton_height": FieldSpec(("OuterCartonHeightCM",), "float"),
            "carton_gross_weight": FieldSpec(("OuterCartonWeightGrossKG",), "float"),
            "image_url": FieldSpec(("MainImage",)),
            "currency": FieldSpec(("Currency", "CurrencyCode")),
            "eco": FieldSpec(("Eco",), "bool"),
            "pvc_free": FieldSpec(("PVC free", "PVCFree"), "bool"),
            "source_timestamp": FieldSpec(
                ("ItemDataLastModifiedDateTime", "FeedCreatedDateTime"), "datetime"
            ),
        }

    def _define_variant_fields(self) -> Dict[str, FieldSpec]:
        """Define XD Connects variant field keys."""
        return {
            "variant_id": FieldSpec(("ItemCode",)),
            "sku": FieldSpec(("ItemCode",)),
            "release_date": FieldSpec(("IntroDate",), "datetime"),
            "category_level1": FieldSpec(("MainCategory",)),
            "category_level2": FieldSpec(("SubCategory",)),
            "color_description": FieldSpec(("Color",)),
            "color_code": FieldSpec(("HexColor1",)),
            "pms_color": FieldSpec(("PMSColor1",)),
            "plc_status": FieldSpec(("ProductLifeCycle",)),
            "gtin": FieldSpec(("EANCode",)),
        }

    def extract_children(
        self, raw: Mapping[str, Any], product: NormalizedProduct
    ) -> Tuple[List[NormalizedVariant], List[NormalizedAsset]]:
        """Build the item variant and its image assets."""
        variant = self.build_variant(raw)
        if variant.variant_id is None:
            return [], []

        assets: List[NormalizedAsset] = []
        seen = set()
        for url, subtype in self._image_urls(raw):
            if url in seen:
                continue
            seen.add(url)
            assets.append(
                NormalizedAsset(
                    url=url,
                    type=AssetType.IMAGE.value,
                    subtype=subtype,
                    source_variant_id=variant.variant_id,
                )
            )

        model_3d = clean_string(raw.get("Imagefile3D"))
        if model_3d:
            assets.append(
                NormalizedAsset(url=model_3d, type=AssetType.DOCUMENT.value, subtype="imagefile_3d")
            )
        return [variant], assets

    def enrich_product(
        self,
        raw: Mapping[str, Any],
        values: Dict[str, Any],
        variants: List[NormalizedVariant],
        assets: List[NormalizedAsset],
        degradations: List[NormalizationDegradation],
    ) -> None:
        """Fill units, image list and price tiers."""
        for field, (unit_field, unit) in UNITS.items():
            if values.get(field) is not None:
                values[unit_field] = unit

        urls: List[str] = []
        for url, _ in self._image_urls(raw):
            if url not in urls:
                urls.append(url)
        values["image_urls"] = urls

        tiers = self.extract_price_tiers(raw)
        values["price_tiers"] = tiers
        price = to_float(raw.get("UnitPrice"))
        if price is None and tiers:
            price = tiers[0].price
        values["price"] = price

    @staticmethod
    def extract_price_tiers(raw: Mapping[str, Any]) -> List[PriceTier]:
        """
        Collect ``PriceTier{n}Qty``/``PriceTier{n}Price`` pairs.

        Tiers missing either side are dropped.
        """
        tiers = []
        for index in range(1, PRICE_TIER_COUNT + 1):
            quantity = to_int(raw.get(f"PriceTier{index}Qty"))
            price = to_float(raw.get(f"PriceTier{index}Price"))
            if quantity is not None and price is not None:
                tiers.append(PriceTier(quantity=quantity, price=price))
        return tiers

    @staticmethod
    def _image_urls(raw: Mapping[str, Any]) -> List[Tuple[str, str]]:
        found = []
        for key, subtype in IMAGE_KEYS:
            url = clean_string(raw.get(key))
            if url:
                found.append((url, subtype))
        for url in split_urls(raw.get("AllImages")):
            found.append((url, "all_images"))
        return found
