"""Pytest configuration and fixtures."""

import copy

import pytest

from catalog_sync.config import Settings
from catalog_sync.database import create_db_engine, create_session_factory, init_db
from catalog_sync.models import Product


@pytest.fixture(scope="function")
def engine(tmp_path):
    """Create a file-backed SQLite engine with all tables."""
    # File-backed so every session gets its own connection
    engine = create_db_engine(f"sqlite:///{tmp_path / 'catalog.db'}", echo=False)
    init_db(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory bound to the test engine."""
    return create_session_factory(engine)


@pytest.fixture(scope="function")
def test_db(session_factory):
    """Create a test database session."""
    session = session_factory()

    yield session

    session.close()


@pytest.fixture
def test_settings():
    """Settings isolated from the environment and .env files."""
    return Settings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        midocean_api_key=None,
        xd_connects_product_data_url=None,
        sync_max_workers=2,
        auto_import_delay_seconds=0,
        quote_latency_scale=0,
    )


@pytest.fixture
def sample_product(test_db):
    """Create a sample Midocean product."""
    product = Product(
        source="midocean",
        external_id="40000011",
        product_code="AR1249",
        name="Zippered cotton bag",
        brand="midocean",
        price=2.5,
    )
    test_db.add(product)
    test_db.commit()
    return product


MIDOCEAN_RECORD = {
    "master_code": "AR1249",
    "master_id": "40000011",
    "product_name": "Zippered cotton bag",
    "brand": "midocean",
    "long_description": "Cotton bag with zipper closure.",
    "short_description": "Cotton bag",
    "length": "12.5",
    "length_unit": "cm",
    "netWeight": "0,25",
    "net_weight_unit": "kg",
    "gross_weight": 0.3,
    "outer_carton_quantity": "99.6",
    "material": "Cotton",
    "timestamp": "2024-05-01T10:00:00Z",
    "variants": [
        {
            "variant_id": "10134325",
            "sku": "AR1249-16",
            "color_description": "black",
            "gtin": "8719941007840",
            "release_date": "2019-01-01",
            "digital_assets": [
                {
                    "url": "https://images.example.com/AR1249-16-front.jpg",
                    "url_highress": "https://images.example.com/AR1249-16-front-hr.jpg",
                    "type": "image",
                    "subtype": "item_picture_front",
                },
                {
                    "url": "https://images.example.com/AR1249-16-back.jpg",
                    "subtype": "item_picture_back",
                },
            ],
        },
        {"variant_id": "10134326", "sku": "AR1249-03", "digital_assets": []},
        {
            "variantId": "10134327",
            "SKU": "AR1249-10",
            "digitalAssets": [{"url": "  ", "type": "image"}],
        },
    ],
    "digital_assets": [
        {
            "url": "https://docs.example.com/AR1249-doc.pdf",
            "type": "document",
            "subtype": "declaration_of_conformity",
        }
    ],
}

XD_RECORD = {
    "ItemCode": "P436.979",
    "ModelCode": "P436.97",
    "ItemName": "Bamboo wireless speaker",
    "Brand": "XD Design",
    "MainCategory": "Tech",
    "SubCategory": "Audio",
    "Color": "brown",
    "PMSColor1": "469C",
    "HexColor1": "#6B4C2A",
    "EANCode": "8714612345678",
    "ProductLifeCycle": "Active",
    "IntroDate": "2023-01-15",
    "ItemLengthCM": 10.5,
    "ItemWidthCM": "6",
    "ItemWeightNetGr": "150",
    "OuterCartonWeightGrossKG": "12.3",
    "InnerboxQty": 10,
    "OuterCartonQty": 50,
    "MainImage": "https://xd.example.com/P436.979-main.jpg",
    "ExtraImage1": "https://xd.example.com/P436.979-extra1.jpg",
    "AllImages": "https://xd.example.com/P436.979-main.jpg, https://xd.example.com/P436.979-extra2.jpg",
    "Imagefile3D": "https://xd.example.com/P436.979.glb",
    "PriceTier1Qty": 50,
    "PriceTier1Price": "4.25",
    "PriceTier2Qty": 250,
    "PriceTier2Price": 3.9,
    "PriceTier3Qty": 500,
    "Currency": "EUR",
    "Eco": True,
    "PVC free": "Yes",
}


@pytest.fixture
def midocean_record():
    """A complete Midocean master record with three variants."""
    return copy.deepcopy(MIDOCEAN_RECORD)


@pytest.fixture
def xd_record():
    """A flat XD Connects item record."""
    return copy.deepcopy(XD_RECORD)


@pytest.fixture
def make_midocean_record():
    """Factory for small Midocean records with a given code."""

    def _make(code, variant_ids=("V1",), name=None, master_id=None, assets=None):
        return {
            "master_code": code,
            "master_id": master_id,
            "product_name": name or f"Product {code}",
            "variants": [
                {
                    "variant_id": variant_id,
                    "sku": f"{code}-{variant_id}",
                    "digital_assets": (assets or {}).get(variant_id, []),
                }
                for variant_id in variant_ids
            ],
        }

    return _make
