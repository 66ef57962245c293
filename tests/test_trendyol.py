"""
Unit tests for woo_shopify/trendyol.py
"""

import pytest
import requests

from woo_shopify.config import TrendyolConfig
from woo_shopify.io import read_rows, write_csv
from woo_shopify.mapping import CategoryTable
from woo_shopify.trendyol import (
    TRENDYOL_COLUMNS,
    build_feed,
    make_feed,
    trendyol_item,
    upload_to_trendyol,
    variant_title,
)

from tests.fakes import FakeResponse, FakeSession


@pytest.fixture
def categories() -> CategoryTable:
    return CategoryTable({"Body Damă": 411, "Prosoape": 902}, id_kind="numeric")


@pytest.fixture
def trendyol_config() -> TrendyolConfig:
    return TrendyolConfig(username="u", password="p", supplier_id="555", brand_id=9, category_id=3, currency="TRY", vat_rate=8)


# ============================================================
# Feed building tests
# ============================================================


class TestVariantTitle:
    """Tests for variant_title."""

    def test_with_options(self):
        """Option pairs are appended to the title."""
        row = {"Option1 Name": "Color", "Option1 Value": "Black", "Option2 Name": "Size", "Option2 Value": "M"}
        assert variant_title("Body", row) == "Body — Color: Black, Size: M"

    def test_without_options(self):
        """Rows without options keep the base title."""
        assert variant_title("Body", {}) == "Body"


class TestBuildFeed:
    """Tests for build_feed."""

    def test_rows(self, shopify_rows, categories):
        """One feed row per valid variant, mapped category and derived fields."""
        result = build_feed(shopify_rows, categories)
        assert result.products == 2
        assert result.removed == 1
        body, prosop = result.rows

        assert body["categoryId"] == 411
        assert body["title"] == "Body Lux — Culoare: Negru, Size: S"
        assert body["description"] == "Body\nelegant"
        assert body["brand"] == "CONTE"
        assert body["productMainId"] == "body-lux"
        assert body["stockCode"] == "BL-NEG-S"
        assert body["quantity"] == 3
        assert body["salePrice"] == 99.0
        assert body["listPrice"] == 129.0
        assert body["currencyType"] == "RON"
        assert body["vatRate"] == 19
        assert body["images"] == "https://cdn.example/body-black.jpg,https://cdn.example/body-1.jpg"
        assert body["attributeColor"] == "Black"
        assert body["attributeSize"] == "S"

        assert prosop["categoryId"] == 902
        assert prosop["brand"] == "Casa"
        assert prosop["stockCode"] == "prosop-mare"
        # compare-at price below the sale price is ignored
        assert prosop["listPrice"] == 45.0

    def test_unmapped_kept(self, shopify_rows):
        """Unmapped labels are kept and reported."""
        shopify_rows[0]["Product Category"] = "unknown-label-xyz"
        result = build_feed(shopify_rows, CategoryTable({"Prosoape": 902}, id_kind="numeric"))
        assert result.rows[0]["categoryId"] == "unknown-label-xyz"
        assert result.unmapped.as_dict() == {"unknown-label-xyz": 1}

    def test_unmapped_ignored(self, shopify_rows):
        """With ignore_unmapped the product is skipped."""
        shopify_rows[0]["Product Category"] = "unknown-label-xyz"
        result = build_feed(shopify_rows, CategoryTable({"Prosoape": 902}, id_kind="numeric"), ignore_unmapped=True)
        assert result.skipped_unmapped == 1
        assert [r["productMainId"] for r in result.rows] == ["prosop-mare"]

    def test_limit(self, shopify_rows, categories):
        """limit caps the number of products."""
        result = build_feed(shopify_rows, categories, limit=1)
        assert result.products == 1
        assert {r["productMainId"] for r in result.rows} == {"body-lux"}

    def test_no_invalid_rows(self, shopify_rows, categories):
        """Rows with an option name but no value never reach the feed."""
        result = build_feed(shopify_rows, categories)
        assert "BL-BROKEN" not in [r["stockCode"] for r in result.rows]


def test_make_feed(tmp_path, shopify_rows, categories):
    """make_feed reads a folder of CSVs and writes one feed CSV."""
    src = tmp_path / "products"
    src.mkdir()
    write_csv(src / "batch.csv", shopify_rows, list(shopify_rows[1]))

    out = tmp_path / "out" / "trendyol.csv"
    result = make_feed(src, out, categories)
    rows = read_rows(out)
    assert len(rows) == len(result.rows) == 2
    assert list(rows[0]) == TRENDYOL_COLUMNS


# ============================================================
# Direct upload tests
# ============================================================


class TestUpload:
    """Tests for the Trendyol upload."""

    def test_item(self, sample_simple_product, trendyol_config):
        """Woo products become Trendyol items."""
        item = trendyol_item(sample_simple_product, trendyol_config)
        assert item["barcode"] == "CL-20"
        assert item["listPrice"] == 24.9
        assert item["salePrice"] == 19.9
        assert item["description"] == "Ciorapi subțiri"
        assert item["images"] == ["https://cdn.example/classic-1.jpg", "https://cdn.example/classic-2.jpg"]
        assert item["brandId"] == 9

    def test_item_without_sku(self, trendyol_config):
        """Products without SKU use a WOO- code."""
        assert trendyol_item({"id": 5}, trendyol_config)["stockCode"] == "WOO-5"

    def test_upload(self, sample_simple_product, trendyol_config):
        """All items go in one authenticated POST."""
        session = FakeSession({"/555/v2/products": FakeResponse({"batchRequestId": "abc"})})
        result = upload_to_trendyol([sample_simple_product], trendyol_config, session=session)
        method, url, kwargs = session.calls[0]
        assert result == {"batchRequestId": "abc"}
        assert method == "POST"
        assert url == "https://api.trendyol.com/sapigw/suppliers/555/v2/products"
        assert len(kwargs["json"]["items"]) == 1
        assert kwargs["auth"].username == "u"
        assert kwargs["timeout"] == trendyol_config.timeout

    def test_upload_failure(self, sample_simple_product, trendyol_config):
        """A rejected upload raises."""
        session = FakeSession({"/v2/products": FakeResponse(status_code=400, text="bad")})
        with pytest.raises(requests.HTTPError):
            upload_to_trendyol([sample_simple_product], trendyol_config, session=session)
