"""Tests for supplier normalization strategies."""

import json
from datetime import datetime

import pytest

from catalog_sync.exceptions import UnknownSupplierError
from catalog_sync.services.feed_strategies import (
    MidoceanFeedStrategy,
    XDConnectsFeedStrategy,
    get_strategy,
)


class TestStrategyRegistry:
    """Test strategy lookup by supplier tag."""

    def test_known_suppliers(self):
        """Test both suppliers resolve to their strategy."""
        assert isinstance(get_strategy("midocean"), MidoceanFeedStrategy)
        assert isinstance(get_strategy("xd-connects"), XDConnectsFeedStrategy)

    def test_unknown_supplier(self):
        """Test an unknown tag raises."""
        with pytest.raises(UnknownSupplierError):
            get_strategy("acme")


class TestMidoceanStrategy:
    """Test MidoceanFeedStrategy."""

    def test_product_fields(self, midocean_record):
        """Test master fields are extracted and coerced."""
        record = MidoceanFeedStrategy().normalize(midocean_record)
        product = record.product

        assert product.source == "midocean"
        assert product.product_code == "AR1249"
        assert product.external_id == "40000011"
        assert product.name == "Zippered cotton bag"
        assert product.description == "Cotton bag with zipper closure."
        assert product.length == 12.5
        assert product.length_unit == "cm"
        assert product.net_weight == 0.25
        assert product.weight == 0.25
        assert product.gross_weight == 0.3
        assert product.outer_carton_quantity == 100
        assert product.source_timestamp == datetime(2024, 5, 1, 10, 0)
        assert product.image_url == "https://images.example.com/AR1249-16-front.jpg"
        assert '"master_code": "AR1249"' in product.raw_data

    def test_children(self, midocean_record):
        """Test variants and the flat tagged asset list."""
        record = MidoceanFeedStrategy().normalize(midocean_record)

        assert [v.variant_id for v in record.variants] == ["10134325", "10134326", "10134327"]
        assert record.variants[2].sku == "AR1249-10"
        assert record.variants[0].release_date == datetime(2019, 1, 1)

        by_url = {a.url: a for a in record.assets}
        front = by_url["https://images.example.com/AR1249-16-front.jpg"]
        assert front.source_variant_id == "10134325"
        assert front.url_high_res == "https://images.example.com/AR1249-16-front-hr.jpg"
        # Missing type on a variant asset defaults to image
        assert by_url["https://images.example.com/AR1249-16-back.jpg"].type == "image"

        doc = by_url["https://docs.example.com/AR1249-doc.pdf"]
        assert doc.source_variant_id is None
        assert doc.type == "document"

        # The blank URL asset is kept for the synchronizer to drop
        assert any(a.url is None and a.source_variant_id == "10134327" for a in record.assets)

    def test_name_fallback_chain(self):
        """Test name falls back through code, external id, placeholder."""
        strategy = MidoceanFeedStrategy()

        assert strategy.normalize({"title": "From title", "master_code": "X1"}).product.name == "From title"
        assert strategy.normalize({"master_code": "X1"}).product.name == "X1"
        assert strategy.normalize({"id": "555"}).product.name == "Midocean Product 555"

        placeholder = strategy.normalize({"brand": "nothing else"})
        assert placeholder.product.name.startswith("Product ")
        assert any(d.field == "name" for d in placeholder.degradations)

    def test_placeholder_names_are_unique(self):
        """Test two nameless records get different placeholders."""
        strategy = MidoceanFeedStrategy()
        first = strategy.normalize({}).product.name
        second = strategy.normalize({}).product.name
        assert first != second

    def test_long_name_truncated(self):
        """Test a 300 character name is cut to 255 with an ellipsis."""
        record = MidoceanFeedStrategy().normalize({"product_name": "n" * 300, "master_code": "L1"})
        assert len(record.product.name) == 255
        assert record.product.name.endswith("...")

    @pytest.mark.parametrize("raw", [None, "garbage", 42, [1, 2], {}])
    def test_never_fails(self, raw):
        """Test malformed input still yields a valid record."""
        record = MidoceanFeedStrategy().normalize(raw)
        assert record.product.name
        assert record.variants == []

    def test_unparseable_numbers_degrade(self):
        """Test bad numbers become None and are reported."""
        record = MidoceanFeedStrategy().normalize(
            {"master_code": "N1", "length": "long", "timestamp": "yesterday"}
        )
        assert record.product.length is None
        assert record.product.source_timestamp is None
        fields = {d.field for d in record.degradations}
        assert {"length", "source_timestamp"} <= fields

    def test_oversized_numbers_degrade(self):
        """Test JSON integers beyond float range become None."""
        huge = json.loads("1" + "0" * 400)
        record = MidoceanFeedStrategy().normalize({"master_code": "X", "length": huge, "timestamp": huge})

        assert record.product.product_code == "X"
        assert record.product.length is None
        assert record.product.source_timestamp is None
        assert {"length", "source_timestamp"} <= {d.field for d in record.degradations}

        xd = XDConnectsFeedStrategy().normalize(
            {"ItemCode": "P1", "UnitPrice": huge, "PriceTier1Qty": huge, "PriceTier1Price": 2.5}
        )
        assert xd.product.price is None
        assert xd.product.price_tiers == []

    def test_raw_data_capped(self):
        """Test the serialized payload is capped and stays valid JSON."""
        strategy = MidoceanFeedStrategy(raw_data_max_bytes=200)
        record = strategy.normalize({"master_code": "BIG", "long_description": "x" * 1000})
        assert len(record.product.raw_data.encode("utf-8")) <= 200
        assert json.loads(record.product.raw_data)["truncated"] is True
        assert any(d.field == "raw_data" for d in record.degradations)

    def test_extract_records_envelopes(self):
        """Test payload unwrapping."""
        strategy = MidoceanFeedStrategy()
        assert strategy.extract_records([{"a": 1}]) == [{"a": 1}]
        assert strategy.extract_records({"products": [{"a": 1}, {"a": 2}]}) == [{"a": 1}, {"a": 2}]
        assert strategy.extract_records({"data": [{"a": 1}]}) == [{"a": 1}]
        assert strategy.extract_records({"master_code": "SOLO"}) == [{"master_code": "SOLO"}]
        assert strategy.extract_records(None) == []
        assert strategy.extract_records("nope") == []


class TestXDConnectsStrategy:
    """Test XDConnectsFeedStrategy."""

    def test_product_fields(self, xd_record):
        """Test flat PascalCase fields, units and flags."""
        product = XDConnectsFeedStrategy().normalize(xd_record).product

        assert product.source == "xd-connects"
        assert product.product_code == "P436.979"
        assert product.external_id is None
        assert product.master_code == "P436.97"
        assert product.name == "Bamboo wireless speaker"
        assert product.category == "Tech"
        assert product.length == 10.5
        assert product.length_unit == "cm"
        assert product.width == 6.0
        assert product.height is None
        assert product.height_unit is None
        assert product.net_weight == 150.0
        assert product.net_weight_unit == "g"
        assert product.carton_gross_weight == 12.3
        assert product.carton_gross_weight_unit == "kg"
        assert product.eco is True
        assert product.pvc_free is True
        assert product.currency == "EUR"

    def test_price_tiers(self, xd_record):
        """Test tier pairs, incomplete tiers dropped, price from tier 1."""
        product = XDConnectsFeedStrategy().normalize(xd_record).product

        assert [(t.quantity, t.price) for t in product.price_tiers] == [(50, 4.25), (250, 3.9)]
        assert product.price == 4.25

    def test_unit_price_wins(self, xd_record):
        """Test an explicit unit price is used over tiers."""
        xd_record["UnitPrice"] = "3.10"
        assert XDConnectsFeedStrategy().normalize(xd_record).product.price == 3.1

    def test_variant_and_images(self, xd_record):
        """Test the single item variant and its deduplicated images."""
        record = XDConnectsFeedStrategy().normalize(xd_record)

        assert len(record.variants) == 1
        variant = record.variants[0]
        assert variant.variant_id == "P436.979"
        assert variant.gtin == "8714612345678"
        assert variant.color_description == "brown"
        assert variant.release_date == datetime(2023, 1, 15)

        images = [a for a in record.assets if a.type == "image"]
        assert [a.url for a in images] == [
            "https://xd.example.com/P436.979-main.jpg",
            "https://xd.example.com/P436.979-extra1.jpg",
            "https://xd.example.com/P436.979-extra2.jpg",
        ]
        assert all(a.source_variant_id == "P436.979" for a in images)

        documents = [a for a in record.assets if a.type == "document"]
        assert len(documents) == 1
        assert documents[0].source_variant_id is None

        assert record.product.image_url == "https://xd.example.com/P436.979-main.jpg"
        assert len(record.product.image_urls) == 3

    def test_name_fallback(self):
        """Test item code fallback and placeholder."""
        strategy = XDConnectsFeedStrategy()
        assert strategy.normalize({"ItemCode": "P1"}).product.name == "P1"
        assert strategy.normalize({"Brand": "x"}).product.name.startswith("Product ")

    def test_record_without_item_code(self):
        """Test an item with no code has no variant."""
        record = XDConnectsFeedStrategy().normalize({"ItemName": "No code", "MainImage": "https://x/a.jpg"})
        assert record.variants == []
        assert record.assets == []
