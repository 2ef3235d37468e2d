"""Tests for ProductService identity resolution and reads."""

import json

from catalog_sync.models import DigitalAsset, Product, ProductVariant
from catalog_sync.schemas import NormalizedProduct, PriceTier
from catalog_sync.services import ProductService


class TestIdentityResolution:
    """Test resolving incoming records to stored products."""

    def test_match_by_external_id(self, test_db, sample_product):
        """Test the external ID matches first."""
        service = ProductService()
        incoming = NormalizedProduct(source="midocean", name="Renamed", external_id="40000011", product_code="OTHER")

        assert service.resolve_existing(test_db, incoming).id == sample_product.id

    def test_match_by_product_code(self, test_db, sample_product):
        """Test the product code matches when the external ID does not."""
        service = ProductService()
        incoming = NormalizedProduct(source="midocean", name="Bag", external_id="99999", product_code="AR1249")

        assert service.resolve_existing(test_db, incoming).id == sample_product.id

    def test_no_keys_is_new(self, test_db, sample_product):
        """Test a record without keys never matches."""
        service = ProductService()
        incoming = NormalizedProduct(source="midocean", name="Zippered cotton bag")

        assert service.resolve_existing(test_db, incoming) is None

    def test_scoped_to_source(self, test_db, sample_product):
        """Test equal codes from another supplier do not match."""
        service = ProductService()
        incoming = NormalizedProduct(source="xd-connects", name="Bag", external_id="40000011", product_code="AR1249")

        assert service.resolve_existing(test_db, incoming) is None


class TestUpsert:
    """Test inserting and overwriting products."""

    def test_insert_then_update(self, test_db):
        """Test the second upsert updates the same row."""
        service = ProductService()
        incoming = NormalizedProduct(
            source="xd-connects",
            name="Speaker",
            product_code="P1",
            brand="XD Design",
            price_tiers=[PriceTier(quantity=50, price=4.25)],
            image_urls=["https://x/a.jpg"],
        )

        product, created = service.upsert(test_db, incoming)
        test_db.commit()
        assert created is True
        assert json.loads(product.price_tiers) == [{"quantity": 50, "price": 4.25}]
        assert product.get_image_urls() == ["https://x/a.jpg"]

        changed = NormalizedProduct(source="xd-connects", name="Speaker v2", product_code="P1")
        updated, created = service.upsert(test_db, changed)
        test_db.commit()

        assert created is False
        assert updated.id == product.id
        assert updated.name == "Speaker v2"
        # Fields the supplier stopped sending are cleared
        assert updated.brand is None
        assert updated.get_price_tiers() == []
        assert test_db.query(Product).count() == 1

    def test_upsert_does_not_commit(self, test_db):
        """Test upsert leaves the transaction to the caller."""
        service = ProductService()
        service.upsert(test_db, NormalizedProduct(source="midocean", name="Temp", product_code="T1"))
        test_db.rollback()

        assert test_db.query(Product).count() == 0


class TestReads:
    """Test search and detail helpers."""

    def test_search_products(self, test_db, sample_product):
        """Test filters on source, term and brand."""
        service = ProductService()
        test_db.add(Product(source="xd-connects", product_code="P436", name="Cotton speaker", brand="XD Design"))
        test_db.commit()

        assert len(service.search_products(test_db, search_term="cotton")) == 2
        assert len(service.search_products(test_db, source="midocean", search_term="cotton")) == 1
        assert len(service.search_products(test_db, brand="XD Design")) == 1
        assert len(service.search_products(test_db, search_term="AR12")) == 1
        assert service.get_brands(test_db) == ["XD Design", "midocean"]

    def test_get_with_children(self, test_db, sample_product):
        """Test grouping of variant and master assets."""
        variant = ProductVariant(product_id=sample_product.id, variant_id="V1", sku="AR1249-16")
        test_db.add(variant)
        test_db.flush()
        test_db.add_all([
            DigitalAsset(product_id=sample_product.id, variant_id=variant.id, url="https://x/v.jpg", type="image"),
            DigitalAsset(product_id=sample_product.id, url="https://x/doc.pdf", type="document"),
        ])
        test_db.commit()

        details = ProductService().get_with_children(test_db, sample_product.id)

        assert details["product"].id == sample_product.id
        assert len(details["variants"]) == 1
        assert details["variants"][0]["variant"].variant_id == "V1"
        assert [a.url for a in details["variants"][0]["assets"]] == ["https://x/v.jpg"]
        assert [a.url for a in details["master_assets"]] == ["https://x/doc.pdf"]

    def test_get_with_children_missing(self, test_db):
        """Test an unknown product gives None."""
        assert ProductService().get_with_children(test_db, 12345) is None
