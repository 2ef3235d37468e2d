"""Base normalization strategy for supplier product feeds."""

import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple

from sqlalchemy import String
from sqlalchemy.sql.schema import Table

from catalog_sync.config import settings
from catalog_sync.models.enums import AssetType
from catalog_sync.models.product import NAME_MAX_LENGTH, Product
from catalog_sync.models.variant import ProductVariant
from catalog_sync.schemas.catalog import (
    CanonicalRecord,
    NormalizationDegradation,
    NormalizedAsset,
    NormalizedProduct,
    NormalizedVariant,
)
from catalog_sync.utils.coercion import (
    clean_string,
    first_present,
    serialize_raw,
    to_bool,
    to_datetime,
    to_float,
    to_int,
    truncate,
)
from catalog_sync.utils.logger import logger


class FieldSpec(NamedTuple):
    """Source keys for one canonical field, in priority order, and its coercion."""

    keys: Tuple[str, ...]
    kind: str = "string"


_COERCERS = {
    "float": to_float,
    "int": to_int,
    "datetime": to_datetime,
    "bool": to_bool,
}


def _column_widths(table: Table) -> Dict[str, int]:
    return {
        column.name: column.type.length
        for column in table.columns
        if isinstance(column.type, String) and column.type.length
    }


PRODUCT_WIDTHS = _column_widths(Product.__table__)
VARIANT_WIDTHS = _column_widths(ProductVariant.__table__)

ASSET_FIELDS: Dict[str, FieldSpec] = {
    "url": FieldSpec(("url", "URL", "Url")),
    "url_high_res": FieldSpec(("url_highress", "urlHighRes", "url_highres", "url_high_res")),
    "type": FieldSpec(("type", "Type")),
    "subtype": FieldSpec(("subtype", "subType", "Subtype")),
}


class BaseFeedStrategy(ABC):
    """
    Abstract base class for supplier normalization strategies.

    Each strategy turns one raw record of its supplier into a canonical
    Product/Variants/Assets triple. ``normalize`` never raises: missing or
    malformed fields degrade to None and the name falls back to codes or a
    placeholder.
    """

    source: str = ""
    label: str = ""

    ENVELOPE_KEYS = ("products", "data", "items", "results", "ProductList", "productList")
    NAME_KEYS: Tuple[str, ...] = ()
    PRODUCT_CODE_KEYS: Tuple[str, ...] = ()
    EXTERNAL_ID_KEYS: Tuple[str, ...] = ()

    def __init__(self, raw_data_max_bytes: Optional[int] = None):
        """Initialize base feed strategy."""
        self.raw_data_max_bytes = raw_data_max_bytes or settings.raw_data_max_bytes
        self.product_fields = self._define_product_fields()
        self.variant_fields = self._define_variant_fields()

    @abstractmethod
    def _define_product_fields(self) -> Dict[str, FieldSpec]:
        """
        Define the source keys of each canonical product column.

        Returns:
            Dictionary mapping Product column names to field specs
        """
        pass

    @abstractmethod
    def _define_variant_fields(self) -> Dict[str, FieldSpec]:
        """
        Define the source keys of each canonical variant column.

        Returns:
            Dictionary mapping ProductVariant column names to field specs
        """
        pass

    @abstractmethod
    def extract_children(
        self, raw: Mapping[str, Any], product: NormalizedProduct
    ) -> Tuple[List[NormalizedVariant], List[NormalizedAsset]]:
        """
        Extract variants and the flat asset list of a raw record.

        Assets are tagged with the supplier variant identifier they belong
        to, or None for master assets.
        """
        pass

    def enrich_product(
        self,
        raw: Mapping[str, Any],
        values: Dict[str, Any],
        variants: List[NormalizedVariant],
        assets: List[NormalizedAsset],
        degradations: List[NormalizationDegradation],
    ) -> None:
        """Hook for supplier fields that are not a plain key lookup."""

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def normalize(self, raw: Any) -> CanonicalRecord:
        """
        Normalize one raw supplier record.

        Args:
            raw: Raw record as decoded from the feed

        Returns:
            Canonical record with any degradations that were applied
        """
        degradations: List[NormalizationDegradation] = []
        if not isinstance(raw, Mapping):
            degradations.append(
                NormalizationDegradation(field="record", reason=f"not an object ({type(raw).__name__})")
            )
            record: Mapping[str, Any] = {}
        else:
            record = raw

        values = self.extract_fields(record, self.product_fields, PRODUCT_WIDTHS, degradations)
        values["product_code"] = clean_string(
            first_present(record, self.PRODUCT_CODE_KEYS), PRODUCT_WIDTHS["product_code"]
        )
        values["external_id"] = clean_string(
            first_present(record, self.EXTERNAL_ID_KEYS), PRODUCT_WIDTHS["external_id"]
        )
        values["name"] = self.resolve_name(
            record, values["product_code"], values["external_id"], degradations
        )

        raw_text, cut = serialize_raw(raw, self.raw_data_max_bytes)
        if cut:
            degradations.append(
                NormalizationDegradation(
                    field="raw_data", reason=f"truncated to {self.raw_data_max_bytes} bytes"
                )
            )
        values["raw_data"] = raw_text

        product = NormalizedProduct(source=self.source, **values)
        variants, assets = self.extract_children(record, product)

        self.enrich_product(record, values, variants, assets, degradations)
        product = NormalizedProduct(source=self.source, **values)

        if degradations:
            logger.debug(
                f"{self.label} record {product.identifying_code} normalized with fallbacks: "
                f"{', '.join(d.field for d in degradations)}"
            )

        return CanonicalRecord(
            product=product, variants=variants, assets=assets, degradations=degradations
        )

    def extract_fields(
        self,
        raw: Mapping[str, Any],
        fields: Dict[str, FieldSpec],
        widths: Dict[str, int],
        degradations: Optional[List[NormalizationDegradation]] = None,
    ) -> Dict[str, Any]:
        """
        Apply a lookup table to a raw mapping.

        Args:
            raw: Raw record or nested raw object
            fields: Canonical field -> source keys and coercion
            widths: Fixed column widths to truncate strings to
            degradations: Collects values that were present but unparseable

        Returns:
            Canonical field values
        """
        values: Dict[str, Any] = {}
        for field, spec in fields.items():
            raw_value = first_present(raw, spec.keys)
            if spec.kind == "string":
                values[field] = clean_string(raw_value, widths.get(field))
                continue

            value = _COERCERS[spec.kind](raw_value)
            if value is None and raw_value is not None and degradations is not None:
                degradations.append(
                    NormalizationDegradation(
                        field=field, reason=f"unparseable {spec.kind} {str(raw_value)[:50]!r}"
                    )
                )
            values[field] = value
        return values

    def resolve_name(
        self,
        raw: Mapping[str, Any],
        product_code: Optional[str],
        external_id: Optional[str],
        degradations: List[NormalizationDegradation],
    ) -> str:
        """
        Resolve a non-empty product name.

        Tries the supplier's name-like keys in order, then the product code,
        then the external id, then a unique placeholder. Names longer than
        the column are cut and end with an ellipsis.
        """
        name = clean_string(first_present(raw, self.NAME_KEYS))
        if name is None:
            if product_code:
                name = product_code
                reason = "fell back to product code"
            elif external_id:
                name = f"{self.label} Product {external_id}"
                reason = "fell back to external id"
            else:
                name = f"Product {int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
                reason = "placeholder name"
            degradations.append(NormalizationDegradation(field="name", reason=reason))

        if len(name) > NAME_MAX_LENGTH:
            name = truncate(name, NAME_MAX_LENGTH)
            degradations.append(
                NormalizationDegradation(field="name", reason=f"truncated to {NAME_MAX_LENGTH} characters")
            )
        return name

    def build_variant(self, raw: Mapping[str, Any]) -> NormalizedVariant:
        """Normalize one raw variant object."""
        return NormalizedVariant(**self.extract_fields(raw, self.variant_fields, VARIANT_WIDTHS))

    def build_asset(
        self,
        raw: Mapping[str, Any],
        source_variant_id: Optional[str],
        default_type: AssetType,
    ) -> NormalizedAsset:
        """Normalize one raw asset object."""
        values = self.extract_fields(raw, ASSET_FIELDS, {"subtype": 100})
        values["type"] = self.normalize_asset_type(values.get("type"), default_type)
        return NormalizedAsset(source_variant_id=source_variant_id, **values)

    @staticmethod
    def normalize_asset_type(value: Optional[str], default: AssetType) -> str:
        """Lower-case an asset type, using the default for unknown types."""
        if value:
            lowered = value.lower()
            if lowered in {t.value for t in AssetType}:
                return lowered
        return default.value

    # ------------------------------------------------------------------
    # Feed payloads
    # ------------------------------------------------------------------

    def extract_records(self, payload: Any) -> List[Any]:
        """
        Unwrap a feed payload into a list of raw records.

        A list is used as-is. An object is searched for a list under one of
        the usual envelope keys; failing that it is a single record.
        """
        if payload is None:
            return []
        if isinstance(payload, list):
            return payload
        if isinstance(payload, Mapping):
            for key in self.ENVELOPE_KEYS:
                value = payload.get(key)
                if isinstance(value, list):
                    logger.debug(f"{self.label} records found under '{key}': {len(value)}")
                    return value
            logger.debug(f"Treating {self.label} payload as a single product object")
            return [payload]
        logger.warning(f"Unexpected {self.label} payload type: {type(payload).__name__}")
        return []

    @staticmethod
    def record_code(raw: Any, keys: Tuple[str, ...]) -> str:
        """Best-effort identifying code of a raw record, for error reports."""
        if isinstance(raw, Mapping):
            code = clean_string(first_present(raw, keys))
            if code:
                return code
        return "unknown"

    def identify(self, raw: Any) -> str:
        """Identifying code of a raw record of this supplier."""
        return self.record_code(raw, self.PRODUCT_CODE_KEYS + self.EXTERNAL_ID_KEYS)
