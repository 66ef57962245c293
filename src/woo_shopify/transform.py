from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests

from .catalog import has_name_without_value
from .images import dedupe_urls, primary_image, product_image_urls, variation_image_src
from .io import BatchWriter
from .normalize import first_present, kg_to_grams, safe_int, text
from .options import EMPTY_OPTIONS, OptionNames, reconcile_option_names, variation_option_values
from .woocommerce import WooClient


log = logging.getLogger(__name__)

SHOPIFY_PRODUCT_HEADERS = [
    "Handle",
    "Title",
    "Body (HTML)",
    "Vendor",
    "Product Category",
    "Type",
    "Tags",
    "Published",
    "Option1 Name",
    "Option1 Value",
    "Option2 Name",
    "Option2 Value",
    "Option3 Name",
    "Option3 Value",
    "Variant SKU",
    "Variant Grams",
    "Variant Inventory Tracker",
    "Variant Inventory Qty",
    "Variant Inventory Policy",
    "Variant Fulfillment Service",
    "Variant Price",
    "Variant Compare At Price",
    "Variant Requires Shipping",
    "Variant Taxable",
    "Variant Barcode",
    "Image Src",
    "Image Position",
    "Image Alt Text",
    "Gift Card",
    "SEO Title",
    "SEO Description",
    "Google Shopping / Google Product Category",
    "Google Shopping / Gender",
    "Google Shopping / Age Group",
    "Google Shopping / MPN",
    "Google Shopping / Condition",
    "Google Shopping / Custom Product",
    "Variant Image",
    "Variant Weight Unit",
    "Variant Tax Code",
    "Cost per item",
    "Included / United States",
    "Price / United States",
    "Compare At Price / United States",
    "Included / International",
    "Price / International",
    "Compare At Price / International",
    "Status",
]

BARCODE_META_KEYS = ("_ean", "_gtin", "_barcode")
DEFAULT_OPTION_NAME = "Title"
DEFAULT_OPTION_VALUE = "Default Title"


def product_handle(product: dict) -> str:
    return text(product.get("slug")) or text(product.get("id"))


def meta_barcode(record: dict) -> str:
    for m in record.get("meta_data") or []:
        if (m or {}).get("key") in BARCODE_META_KEYS:
            return text(m.get("value"))
    return ""


def _bool(v: bool) -> str:
    return "TRUE" if v else "FALSE"


def map_to_shopify_row(product: dict, variation: Optional[dict] = None, option_names: OptionNames = EMPTY_OPTIONS) -> Dict:
    """One Shopify product CSV row for ``product`` (parent row) or one of its variations."""
    base = variation if variation is not None else product
    is_variant = variation is not None

    published = product.get("status") == "publish"
    categories = product.get("categories") or []
    first_cat = text((categories[0] or {}).get("name")) if categories else ""
    tags = ", ".join(text((t or {}).get("name")) for t in product.get("tags") or [])
    parent_src, parent_alt = primary_image(product)

    names = list(option_names)
    values = ["", "", ""]
    if is_variant:
        values = list(variation_option_values(variation, option_names))
    elif product.get("type") == "simple" or not any(names):
        names = [DEFAULT_OPTION_NAME, "", ""]
        values = [DEFAULT_OPTION_VALUE, "", ""]

    backorders = base.get("backorders")

    out = {h: "" for h in SHOPIFY_PRODUCT_HEADERS}
    out["Handle"] = product_handle(product)
    out["Title"] = text(product.get("name"))
    out["Body (HTML)"] = product.get("description") or ""
    out["Product Category"] = first_cat
    out["Type"] = text(product.get("type"))
    out["Tags"] = tags
    out["Published"] = _bool(published)
    for i in range(3):
        out[f"Option{i + 1} Name"] = names[i]
        out[f"Option{i + 1} Value"] = values[i]
    out["Variant SKU"] = text(base.get("sku"))
    out["Variant Grams"] = kg_to_grams(base.get("weight"))
    out["Variant Inventory Qty"] = safe_int(base.get("stock_quantity"), 0)
    out["Variant Inventory Policy"] = "continue" if backorders and backorders != "no" else "deny"
    out["Variant Fulfillment Service"] = "manual"
    out["Variant Price"] = first_present(base.get("price"), base.get("sale_price"), base.get("regular_price"))
    out["Variant Compare At Price"] = first_present(base.get("regular_price"))
    out["Variant Requires Shipping"] = _bool(base.get("virtual") is not True)
    out["Variant Taxable"] = _bool((base.get("tax_status") or "taxable") == "taxable")
    out["Variant Barcode"] = meta_barcode(base)
    # parent rows carry the product image, variant rows only their own image
    if is_variant:
        out["Variant Image"] = variation_image_src(variation)
    else:
        out["Image Src"] = parent_src
        out["Image Position"] = 1 if parent_src else ""
        out["Image Alt Text"] = parent_alt
    out["Gift Card"] = "FALSE"
    out["Google Shopping / Condition"] = "new"
    out["Google Shopping / Custom Product"] = "TRUE"
    out["Variant Weight Unit"] = "g"
    out["Included / United States"] = "TRUE"
    out["Included / International"] = "TRUE"
    out["Status"] = "active" if published else "draft"
    return out


def image_row(handle: str, src: str, position: int, alt: str = "") -> Dict:
    """Image-only row adding one more picture to an already listed product."""
    out = {h: "" for h in SHOPIFY_PRODUCT_HEADERS}
    out["Handle"] = handle
    out["Image Src"] = src
    out["Image Position"] = position
    out["Image Alt Text"] = alt
    return out


def product_rows(product: dict, variations: List[dict], stats: Optional["ExportSummary"] = None) -> List[Dict]:
    """All rows for one product.

    Variant rows (or the single default row) come first so the importer reads
    the product fields from the first row of the handle. The parent image row
    (position 1) and the remaining images follow.
    """
    handle = product_handle(product)
    option_names = reconcile_option_names(variations) if variations else EMPTY_OPTIONS

    variant_rows: List[Dict] = []
    for v in variations:
        row = map_to_shopify_row(product, v, option_names)
        if has_name_without_value(row):
            log.info("Skipping variant (name without value) | product=%s sku=%s", product.get("id"), text(v.get("sku")) or "(no-sku)")
            if stats is not None:
                stats.skipped_variants += 1
            continue
        variant_rows.append(row)

    rows: List[Dict] = []
    parent_src, parent_alt = primary_image(product)
    if variant_rows:
        rows.extend(variant_rows)
        if parent_src:
            rows.append(image_row(handle, parent_src, 1, parent_alt))
    else:
        if variations:
            log.info("No valid variants for product %s; exporting it as a single item", product.get("id"))
        rows.append(map_to_shopify_row(product, None, EMPTY_OPTIONS))

    listed = {r["Image Src"] for r in rows if r["Image Src"]}
    position = 2
    for src in dedupe_urls(product_image_urls(product)):
        if src in listed:
            continue
        rows.append(image_row(handle, src, position))
        listed.add(src)
        position += 1
    return rows


@dataclass
class ExportSummary:
    total_rows: int = 0
    products: int = 0
    skipped_variants: int = 0
    failed_variation_fetches: int = 0
    failed_pages: List[int] = field(default_factory=list)
    exported_one: bool = False
    csv_files: List[str] = field(default_factory=list)
    archive: bytes = b""

    def to_dict(self) -> Dict:
        return {
            "total_rows": self.total_rows,
            "products": self.products,
            "skipped_variants": self.skipped_variants,
            "failed_variation_fetches": self.failed_variation_fetches,
            "failed_pages": len(self.failed_pages),
            "csv_files": len(self.csv_files),
        }


def export_products(
    client: WooClient,
    per_page: int = 100,
    batch_size: int = 2000,
    status: str = "publish",
    category_slug: str = "",
    only_one: bool = False,
    start_page: int = 1,
) -> ExportSummary:
    """Fetch every product page and write Shopify CSV batches into a ZIP archive."""
    log.info(
        "[Woo Export] Start | per_page=%s | batch=%s | status=%s | category=%s | only_one=%s",
        per_page, batch_size, status, category_slug or "(all)", only_one,
    )
    writer = BatchWriter(SHOPIFY_PRODUCT_HEADERS, batch_size=batch_size, prefix="woocommerce_products")
    summary = ExportSummary()
    category_id = client.resolve_category_id(category_slug) if category_slug else ""

    for page, products in client.iter_product_pages(per_page, status, category_id, start_page, summary.failed_pages):
        for p in products:
            if only_one and p.get("type") != "variable":
                continue

            variations: List[dict] = []
            if p.get("type") == "variable":
                try:
                    variations = client.fetch_variations(p.get("id"))
                    log.info("Product %s: variations=%d", p.get("id"), len(variations))
                except requests.RequestException as e:
                    summary.failed_variation_fetches += 1
                    log.warning("Variations fetch failed for product %s (page %d): %s", p.get("id"), page, e)

            for row in product_rows(p, variations, summary):
                writer.append(row)
            summary.products += 1

            if only_one:
                summary.exported_one = True
                break
        if summary.exported_one:
            break

    summary.archive = writer.finalize()
    summary.total_rows = writer.total_rows
    summary.csv_files = writer.manifest
    log.info(
        "[Woo Export] Done. Total rows: %d. CSV files: %d. Failed pages: %d",
        summary.total_rows, len(summary.csv_files), len(summary.failed_pages),
    )
    return summary
