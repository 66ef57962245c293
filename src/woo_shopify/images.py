from __future__ import annotations
import re
from typing import Dict, Iterable, List, Tuple

from .catalog import ProductGroup


_HTTP_RE = re.compile(r"^https?://", re.IGNORECASE)


def dedupe_urls(urls: Iterable) -> List[str]:
    seen = set()
    out: List[str] = []
    for u in urls:
        u = str(u or "").strip()
        if not u or u in seen:
            continue
        seen.add(u)
        out.append(u)
    return out


def ordered_image_list(variant_image, parent_image, gallery: Iterable = ()) -> List[str]:
    """Variant image first, then the parent image, then gallery images, without repeats."""
    return dedupe_urls([variant_image, parent_image, *gallery])


def image_list_for_row(group: ProductGroup, row: dict) -> List[str]:
    parent_src = (group.parent or {}).get("Image Src")
    gallery = [g.get("Image Src") for g in group.gallery]
    return ordered_image_list(row.get("Variant Image"), parent_src, gallery)


def primary_image(product: dict) -> Tuple[str, str]:
    """(src, alt) of a WooCommerce product's first image."""
    images = product.get("images") or []
    first = (images[0] if images else None) or {}
    src = str(first.get("src") or "")
    alt = str(first.get("alt") or first.get("name") or "")
    return src, alt


def product_image_urls(product: dict) -> List[str]:
    return dedupe_urls((img or {}).get("src") for img in product.get("images") or [])


def variation_image_src(variation: dict | None) -> str:
    return str(((variation or {}).get("image") or {}).get("src") or "")


def captioned_images(product: dict) -> List[Dict[str, str]]:
    """Absolute http(s) images as ``{url, caption}`` pairs."""
    out: List[Dict[str, str]] = []
    for img in product.get("images") or []:
        img = img or {}
        url = str(img.get("url") or img.get("src") or "").strip()
        if not url or not _HTTP_RE.match(url):
            continue
        caption = str(img.get("caption") or img.get("alt") or img.get("name") or "").strip()
        out.append({"url": url, "caption": caption})
    return out
