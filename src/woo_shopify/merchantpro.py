from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import requests
from requests.auth import HTTPBasicAuth

from .config import MerchantProConfig
from .describe import strip_tags
from .images import captioned_images
from .normalize import text, to_price, to_stock


log = logging.getLogger(__name__)


@dataclass
class UploadResult:
    uploaded: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"uploaded": self.uploaded, "failed": self.failed}


def variant_name(options: List[Dict[str, str]]) -> str:
    return ", ".join(o["value"] for o in options if o.get("value"))


def _variant_options(variation: dict) -> List[Dict[str, str]]:
    out = []
    for attr in variation.get("attributes") or []:
        name = text((attr or {}).get("name"))
        value = text((attr or {}).get("option"))
        if name and value:
            out.append({"name": name, "value": value})
    return out


def _make_basic(payload: Dict, product: dict) -> None:
    payload["type"] = "basic"
    payload["stock"] = to_stock(product.get("stock_quantity"), 0)
    payload["price_gross"] = to_price(product.get("price") or product.get("regular_price"), 0)


def build_payload(
    product: dict,
    fetch_variation: Callable[[object], dict],
    category_id: int = 208,
) -> Dict:
    """MerchantPro product payload for a WooCommerce product.

    ``fetch_variation(variation_id)`` returns the variation JSON and may raise
    ``requests.RequestException``; failed fetches and invalid variants (missing or
    duplicate SKU, no options, no price) are skipped. When no variant survives
    the product is sent as ``basic``.
    """
    variation_ids = product.get("variations") or []
    payload: Dict = {
        "type": "multi_variant" if variation_ids else "basic",
        "sku": text(product.get("sku")) or text(product.get("id")),
        "name": product.get("name"),
        "description": strip_tags(product.get("description")),
        "category_id": category_id,
        "images": captioned_images(product),
        "variants": [],
    }
    if not variation_ids:
        _make_basic(payload, product)
        return payload

    # name -> ordered values, seeded from the parent's declared attributes
    attr_values: Dict[str, List[str]] = {}
    for a in product.get("attributes") or []:
        name = text((a or {}).get("name"))
        if not name:
            continue
        values = attr_values.setdefault(name, [])
        for opt in a.get("options") or []:
            v = text(opt)
            if v and v not in values:
                values.append(v)

    used_skus = set()
    for variation_id in variation_ids:
        try:
            variation = fetch_variation(variation_id)
        except requests.RequestException as e:
            log.warning("Failed to fetch variation %s for product %s: %s", variation_id, product.get("name"), e)
            continue

        options = _variant_options(variation)
        for o in options:
            values = attr_values.setdefault(o["name"], [])
            if o["value"] not in values:
                values.append(o["value"])

        sku = text(variation.get("sku")) or f"var-{variation.get('id')}"
        price = to_price(variation.get("price") or variation.get("regular_price"), None)
        if not sku or sku in used_skus:
            log.warning('[MerchantPro] Skipping variant with missing/duplicate SKU for product "%s" (got: "%s")', product.get("name"), sku)
            continue
        if not options:
            log.warning('[MerchantPro] Skipping variant without options for product "%s" (sku: "%s")', product.get("name"), sku)
            continue
        if price is None:
            log.warning('[MerchantPro] Skipping variant without valid price for product "%s" (sku: "%s")', product.get("name"), sku)
            continue

        payload["variants"].append({
            "sku": sku,
            "name": text(variation.get("name")) or variant_name(options),
            "stock": to_stock(variation.get("stock_quantity"), 0),
            "price_gross": price,
            "variant_options": options,
        })
        used_skus.add(sku)

    if not payload["variants"]:
        log.warning('[MerchantPro] No valid variants built for "%s". Sending as basic product instead.', product.get("name"))
        _make_basic(payload, product)
    else:
        payload["variant_attributes"] = [
            {"name": name, "options": [{"value": v} for v in values]}
            for name, values in attr_values.items()
        ]
    return payload


def build_session(cfg: MerchantProConfig) -> requests.Session:
    s = requests.Session()
    s.auth = HTTPBasicAuth(cfg.user, cfg.password)
    s.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
    return s


def upload_to_merchantpro(
    products: List[dict],
    cfg: MerchantProConfig,
    fetch_variation: Callable[[dict, object], dict],
    session: Optional[requests.Session] = None,
) -> UploadResult:
    """One POST per product; failures are logged and counted, never raised.

    ``fetch_variation(product, variation_id)`` supplies variation details.
    """
    s = session if session is not None else build_session(cfg)
    result = UploadResult()
    for product in products:
        name = product.get("name")
        try:
            payload = build_payload(product, lambda vid: fetch_variation(product, vid), cfg.category_id)
            log.debug("[MerchantPro] Payload for %s: %s", name, json.dumps(payload, ensure_ascii=False))
            resp = s.post(cfg.api_url, json=payload, timeout=cfg.timeout)
            if not resp.ok:
                log.error("[MerchantPro] Failed to upload %s | Status: %s | Response: %s", name, resp.status_code, resp.text)
                result.failed += 1
            else:
                log.info("[MerchantPro] Uploaded product: %s", name)
                result.uploaded += 1
        except (requests.RequestException, AttributeError, TypeError, ValueError) as e:
            log.error("[MerchantPro] Error processing %s: %s", name, e)
            result.failed += 1
    return result
