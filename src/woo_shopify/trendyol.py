"""Trendyol output: a CSV feed built from Shopify product CSVs, and a direct
product upload built from WooCommerce products.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import requests
from requests.auth import HTTPBasicAuth

from .catalog import ProductGroup, group_rows
from .config import TrendyolConfig
from .describe import html_to_text, strip_tags
from .images import image_list_for_row, product_image_urls
from .io import list_csv_files, read_rows, write_csv
from .mapping import CategoryTable, UnmappedReport
from .normalize import first_present, normalize_color, safe_float, safe_int, text
from .options import OptionNames, reconcile_row_options, row_option_values


log = logging.getLogger(__name__)

TRENDYOL_COLUMNS = [
    "barcode",
    "title",
    "brand",
    "categoryId",
    "description",
    "productMainId",
    "stockCode",
    "quantity",
    "vatRate",
    "listPrice",
    "salePrice",
    "currencyType",
    "images",
    "attributeColor",
    "attributeSize",
]


def variant_title(base_title: str, row: dict) -> str:
    """``Base — Color: Black, Size: M`` for rows that carry option values."""
    parts = []
    for i in (1, 2, 3):
        name = text(row.get(f"Option{i} Name"))
        value = text(row.get(f"Option{i} Value"))
        if name and value:
            parts.append(f"{name}: {value}")
    return f"{base_title} — {', '.join(parts)}" if parts else base_title


def variant_attributes(row: dict, option_names: OptionNames) -> tuple[str, str]:
    values = dict(zip(option_names, row_option_values(row, option_names)))
    return normalize_color(values.get("Color", "")), values.get("Size", "")


@dataclass
class FeedResult:
    rows: List[Dict] = field(default_factory=list)
    products: int = 0
    skipped_unmapped: int = 0
    removed: int = 0
    unmapped: UnmappedReport = field(default_factory=UnmappedReport)


def group_feed_rows(
    group: ProductGroup,
    category_id,
    brand_fallback: str,
    currency: str,
    vat_rate: int,
) -> List[Dict]:
    head = group.head or {}
    base_title = text(head.get("Title"))
    description = html_to_text(head.get("Body (HTML)"))
    brand = text(head.get("Vendor")) or brand_fallback
    option_names = reconcile_row_options(group.effective_variants())

    out: List[Dict] = []
    for v in group.effective_variants():
        price = safe_float(v.get("Variant Price") or v.get("Price") or head.get("Variant Price"))
        compare = safe_float(v.get("Variant Compare At Price") or head.get("Variant Compare At Price"))
        color, size = variant_attributes(v, option_names)
        out.append({
            "barcode": text(v.get("Variant Barcode")),
            "title": variant_title(base_title, v),
            "brand": brand,
            "categoryId": category_id,
            "description": description,
            "productMainId": group.handle,
            "stockCode": text(v.get("Variant SKU") or v.get("SKU")) or group.handle,
            "quantity": safe_int(v.get("Variant Inventory Qty"), 0),
            "vatRate": vat_rate,
            "listPrice": compare if compare > 0 and compare >= price else price,
            "salePrice": price,
            "currencyType": currency,
            "images": ",".join(image_list_for_row(group, v)),
            "attributeColor": color,
            "attributeSize": size,
        })
    return out


def build_feed(
    rows: Iterable[dict],
    categories: CategoryTable,
    brand_fallback: str = "CONTE",
    currency: str = "RON",
    vat_rate: int = 19,
    ignore_unmapped: bool = False,
    limit: int = 0,
) -> FeedResult:
    grouping = group_rows(rows)
    result = FeedResult(removed=grouping.removed)
    currency = currency.upper()

    for group in grouping:
        head = group.head
        if head is None:
            continue
        label = head.get("Product Category") or ""
        resolved = categories.resolve(label)
        if resolved.unmapped:
            result.unmapped.record(label)
            if ignore_unmapped:
                log.info('Unmapped category "%s" for handle=%s, skipped', label, group.handle)
                result.skipped_unmapped += 1
                continue
            log.info('Unmapped category "%s" for handle=%s, keeping label', label, group.handle)

        result.rows.extend(group_feed_rows(group, resolved.value, brand_fallback, currency, vat_rate))
        result.products += 1
        if limit > 0 and result.products >= limit:
            break
    return result


def make_feed(
    input_dir: Path,
    output_path: Path,
    categories: CategoryTable,
    brand_fallback: str = "CONTE",
    currency: str = "RON",
    vat_rate: int = 19,
    ignore_unmapped: bool = False,
    limit: int = 0,
) -> FeedResult:
    """Read every Shopify product CSV in ``input_dir`` and write one Trendyol CSV."""
    all_rows: List[dict] = []
    for p in list_csv_files(input_dir):
        all_rows.extend(read_rows(p))
    result = build_feed(all_rows, categories, brand_fallback, currency, vat_rate, ignore_unmapped, limit)
    write_csv(output_path, result.rows, TRENDYOL_COLUMNS)
    result.unmapped.log_summary(log, context=str(input_dir))
    log.info("Wrote %d Trendyol rows to %s", len(result.rows), output_path)
    return result


def product_code(product: dict) -> str:
    return text(product.get("sku")) or f"WOO-{product.get('id')}"


def trendyol_item(product: dict, cfg: TrendyolConfig) -> Dict:
    code = product_code(product)
    return {
        "barcode": code,
        "title": text(product.get("name")),
        "productMainId": code,
        "brandId": cfg.brand_id,
        "categoryId": cfg.category_id,
        "quantity": safe_int(product.get("stock_quantity"), 0),
        "stockCode": code,
        "dimensionalWeight": 0.5,
        "description": strip_tags(product.get("description")),
        "currencyType": cfg.currency,
        "listPrice": safe_float(first_present(product.get("regular_price"), product.get("price")), 0.0),
        "salePrice": safe_float(first_present(product.get("sale_price"), product.get("price")), 0.0),
        "vatRate": cfg.vat_rate,
        "images": product_image_urls(product),
        "attributes": [],
    }


def upload_to_trendyol(products: List[dict], cfg: TrendyolConfig, session: Optional[requests.Session] = None) -> Dict:
    """POST all products as one ``{"items": [...]}`` batch."""
    s = session if session is not None else requests.Session()
    items = [trendyol_item(p, cfg) for p in products]
    resp = s.post(
        cfg.products_url,
        json={"items": items},
        auth=HTTPBasicAuth(cfg.username, cfg.password),
        timeout=cfg.timeout,
    )
    if not resp.ok:
        log.error("[Trendyol] Upload failed: %s %s", resp.status_code, resp.text)
        resp.raise_for_status()
    log.info("[Trendyol] Uploaded %d products successfully", len(items))
    return resp.json()
