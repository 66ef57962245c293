"""
Shared pytest fixtures for all tests.
"""

import pytest

from woo_shopify.config import WooConfig
from woo_shopify.woocommerce import WooClient

from tests.fakes import FakeSession


# ============================================================
# WooCommerce client fixtures
# ============================================================


@pytest.fixture
def woo_config() -> WooConfig:
    return WooConfig(base_url="https://shop.example", consumer_key="ck", consumer_secret="cs", timeout=5.0)


@pytest.fixture
def make_woo_client(woo_config):
    """Factory returning (client, session) for a given route table."""

    def _make(routes):
        session = FakeSession(routes)
        return WooClient(woo_config, session=session), session

    return _make


# ============================================================
# Sample Data Fixtures
# ============================================================


@pytest.fixture
def sample_simple_product() -> dict:
    """A published simple WooCommerce product."""
    return {
        "id": 11,
        "name": "Ciorapi Classic 20 DEN",
        "slug": "ciorapi-classic-20-den",
        "type": "simple",
        "status": "publish",
        "description": "<p>Ciorapi <b>subțiri</b></p>",
        "sku": "CL-20",
        "price": "19.90",
        "regular_price": "24.90",
        "sale_price": "19.90",
        "stock_quantity": 12,
        "weight": "0.05",
        "backorders": "no",
        "tax_status": "taxable",
        "categories": [{"id": 5, "name": "Ciorapi Subțiri"}],
        "tags": [{"name": "nou"}, {"name": "vara"}],
        "images": [
            {"src": "https://cdn.example/classic-1.jpg", "alt": "Classic"},
            {"src": "https://cdn.example/classic-2.jpg", "alt": ""},
        ],
        "meta_data": [{"key": "_ean", "value": "5941234567890"}],
    }


@pytest.fixture
def sample_variable_product() -> dict:
    """A variable WooCommerce product with two variations."""
    return {
        "id": 42,
        "name": "Body Lux",
        "slug": "body-lux",
        "type": "variable",
        "status": "publish",
        "description": "<p>Body elegant</p>",
        "sku": "BL",
        "price": "99",
        "regular_price": "",
        "categories": [{"id": 7, "name": "Body Damă"}],
        "tags": [],
        "images": [
            {"src": "https://cdn.example/body-1.jpg", "alt": "Body"},
            {"src": "https://cdn.example/body-2.jpg"},
        ],
        "attributes": [
            {"name": "Culoare", "options": ["Negru", "Alb"]},
            {"name": "Mărime", "options": ["S", "M"]},
        ],
        "variations": [101, 102],
    }


@pytest.fixture
def sample_variations() -> list:
    """Variations of sample_variable_product."""
    return [
        {
            "id": 101,
            "sku": "BL-NEG-S",
            "price": "99",
            "regular_price": "129",
            "stock_quantity": 3,
            "weight": "0.2",
            "attributes": [{"name": "Culoare", "option": "Negru"}, {"name": "Mărime", "option": "S"}],
            "image": {"src": "https://cdn.example/body-black.jpg"},
        },
        {
            "id": 102,
            "sku": "BL-ALB-M",
            "price": "",
            "sale_price": "",
            "regular_price": "129",
            "stock_quantity": None,
            "backorders": "notify",
            "attributes": [{"name": "Culoare", "option": "Alb"}, {"name": "Mărime", "option": "M"}],
            "image": {"src": "https://cdn.example/body-white.jpg"},
        },
    ]


@pytest.fixture
def sample_customer() -> dict:
    """An active WooCommerce customer."""
    return {
        "id": 7,
        "email": "Ana.Pop@Example.COM",
        "first_name": "Ana",
        "last_name": "",
        "orders_count": 2,
        "is_paying_customer": True,
        "billing": {
            "first_name": "Ana",
            "last_name": "Pop",
            "address_1": "Str. Lalelelor 3",
            "city": "Cluj-Napoca",
            "state": "CJ",
            "country": "RO",
            "postcode": "400000",
            "phone": "0722000000",
        },
        "shipping": {"company": "Pop SRL", "city": "Bucuresti"},
    }


@pytest.fixture
def shopify_rows() -> list:
    """Shopify-style CSV rows for two products (one variable, one simple)."""
    return [
        {
            "Handle": "body-lux", "Title": "Body Lux", "Body (HTML)": "<p>Body<br>elegant</p>",
            "Vendor": "", "Product Category": "Body Damă",
            "Option1 Name": "", "Option1 Value": "", "Option2 Name": "", "Option2 Value": "",
            "Option3 Name": "", "Option3 Value": "", "Variant SKU": "", "Variant Price": "",
            "Variant Compare At Price": "", "Image Src": "https://cdn.example/body-1.jpg", "Variant Image": "",
        },
        {
            "Handle": "body-lux", "Title": "", "Body (HTML)": "", "Vendor": "", "Product Category": "",
            "Option1 Name": "Culoare", "Option1 Value": "Negru", "Option2 Name": "Size", "Option2 Value": "S",
            "Option3 Name": "", "Option3 Value": "", "Variant SKU": "BL-NEG-S", "Variant Price": "99",
            "Variant Compare At Price": "129", "Variant Inventory Qty": "3",
            "Image Src": "", "Variant Image": "https://cdn.example/body-black.jpg",
        },
        {
            "Handle": "body-lux", "Title": "", "Body (HTML)": "", "Vendor": "", "Product Category": "",
            "Option1 Name": "Culoare", "Option1 Value": "", "Option2 Name": "Size", "Option2 Value": "M",
            "Option3 Name": "", "Option3 Value": "", "Variant SKU": "BL-BROKEN", "Variant Price": "99",
            "Variant Compare At Price": "", "Image Src": "", "Variant Image": "",
        },
        {
            "Handle": "body-lux", "Title": "", "Body (HTML)": "", "Vendor": "", "Product Category": "",
            "Option1 Name": "", "Option1 Value": "", "Option2 Name": "", "Option2 Value": "",
            "Option3 Name": "", "Option3 Value": "", "Variant SKU": "", "Variant Price": "",
            "Variant Compare At Price": "", "Image Src": "https://cdn.example/body-black.jpg", "Variant Image": "",
        },
        {
            "Handle": "prosop-mare", "Title": "Prosop Mare", "Body (HTML)": "", "Vendor": "Casa",
            "Product Category": "Prosoape",
            "Option1 Name": "Title", "Option1 Value": "Default Title", "Option2 Name": "", "Option2 Value": "",
            "Option3 Name": "", "Option3 Value": "", "Variant SKU": "", "Variant Price": "45",
            "Variant Compare At Price": "30", "Image Src": "https://cdn.example/prosop.jpg", "Variant Image": "",
        },
    ]
