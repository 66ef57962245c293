"""Grouping of flat Shopify-style catalog rows into products.

A product export (ours or Shopify's) is one row per variant plus optional
image-only rows, all sharing a ``Handle``. :func:`group_rows` rebuilds the
parent / variants / gallery structure from such rows.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .normalize import is_blank


log = logging.getLogger(__name__)

OPTION_SLOTS = (1, 2, 3)


class RowKind(str, Enum):
    PARENT = "parent"
    VARIANT = "variant"
    GALLERY = "gallery"
    DISCARDED = "discarded"


def has_name_without_value(row: dict) -> bool:
    for i in OPTION_SLOTS:
        name = row.get(f"Option{i} Name")
        value = row.get(f"Option{i} Value")
        if not is_blank(name) and is_blank(value):
            return True
    return False


def row_handle(row: dict) -> str:
    return str(row.get("Handle") or row.get("handle") or "").strip()


@dataclass
class ProductGroup:
    handle: str
    parent: Optional[dict] = None
    variants: List[dict] = field(default_factory=list)
    gallery: List[dict] = field(default_factory=list)

    def effective_variants(self) -> List[dict]:
        """Variant rows, or the parent alone when the product has none."""
        if self.variants:
            return list(self.variants)
        return [self.parent] if self.parent is not None else []

    @property
    def head(self) -> Optional[dict]:
        """Row carrying product-level fields (title, category, description)."""
        if self.parent is not None:
            return self.parent
        return self.variants[0] if self.variants else None


def classify(row: dict, group: ProductGroup) -> RowKind:
    is_gallery = (
        is_blank(row.get("Title"))
        and is_blank(row.get("Variant SKU"))
        and not is_blank(row.get("Image Src"))
        and all(is_blank(row.get(f"Option{i} Name")) for i in OPTION_SLOTS)
    )
    if is_gallery:
        return RowKind.GALLERY
    if not is_blank(row.get("Variant SKU")) or not is_blank(row.get("Variant Image")):
        return RowKind.VARIANT
    if group.parent is None:
        return RowKind.PARENT
    return RowKind.DISCARDED


@dataclass
class GroupingResult:
    groups: Dict[str, ProductGroup] = field(default_factory=dict)
    removed: int = 0
    discarded: int = 0

    def __iter__(self):
        return iter(self.groups.values())

    def __len__(self) -> int:
        return len(self.groups)


def group_rows(rows: Iterable[dict]) -> GroupingResult:
    result = GroupingResult()
    for row in rows:
        handle = row_handle(row)
        if not handle:
            continue
        if has_name_without_value(row):
            result.removed += 1
            log.debug("Dropping row with option name but no value | handle=%s sku=%s", handle, row.get("Variant SKU") or "")
            continue
        group = result.groups.get(handle)
        if group is None:
            group = result.groups[handle] = ProductGroup(handle)

        kind = classify(row, group)
        if kind is RowKind.GALLERY:
            group.gallery.append(row)
        elif kind is RowKind.VARIANT:
            group.variants.append(row)
        elif kind is RowKind.PARENT:
            group.parent = row
        else:
            result.discarded += 1
    return result
