from __future__ import annotations
import json
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .normalize import fold, is_blank, text


log = logging.getLogger(__name__)

TAXONOMY_PREFIX = "gid://shopify/TaxonomyCategory/"

ID_WOMENS_CLOTHING = TAXONOMY_PREFIX + "aa-1-6"
ID_MENS_CLOTHING = TAXONOMY_PREFIX + "aa-1-5"
ID_BODYSUITS = TAXONOMY_PREFIX + "aa-1-6-5"
ID_WOMENS_UNDERPANTS = TAXONOMY_PREFIX + "aa-1-6-11"
ID_HOSIERY = TAXONOMY_PREFIX + "aa-1-6-18"
ID_SHAPEWEAR = TAXONOMY_PREFIX + "aa-1-6-19"
ID_SWIMWEAR = TAXONOMY_PREFIX + "aa-1-6-31"
ID_TOWELS = TAXONOMY_PREFIX + "aa-9-7-2"

# Store category labels (Romanian) -> Shopify taxonomy id
RO_LABEL_TO_TAXONOMY = MappingProxyType({
    "Chiloți Damă": ID_WOMENS_UNDERPANTS,
    "Femei": ID_WOMENS_CLOTHING,
    "Body Damă": ID_BODYSUITS,
    "Costume baie": ID_SWIMWEAR,
    "Bărbați": ID_MENS_CLOTHING,
    "Ciorapi Modelatori": ID_SHAPEWEAR,
    "Prosoape": ID_TOWELS,
    "Ciorapi și Dresuri": ID_HOSIERY,
    "Ciorapi Groși": ID_HOSIERY,
    "Ciorapi Subțiri": ID_HOSIERY,
    "Ciorapi Bumbac": ID_HOSIERY,
    "Ciorapi Flaușați": ID_HOSIERY,
    "Ciorapi Poliamidă": ID_HOSIERY,
    "Șosete Copii": ID_HOSIERY,
    # broad fallbacks until narrower taxonomy ids are picked
    "Colanți Damă": ID_WOMENS_CLOTHING,
    "Colanți Copii": ID_WOMENS_CLOTHING,
    "Blugi Damă": ID_WOMENS_CLOTHING,
    "Textile Damă": ID_WOMENS_CLOTHING,
    "Accesorii": ID_WOMENS_CLOTHING,
    "Copii": ID_WOMENS_CLOTHING,
    "Diverse Eco": ID_WOMENS_CLOTHING,
})

BREADCRUMB_TO_TAXONOMY = MappingProxyType({
    "Apparel & Accessories > Clothing > Lingerie > Women's Underpants": ID_WOMENS_UNDERPANTS,
    "Apparel & Accessories > Clothing > Women’s Clothing": ID_WOMENS_CLOTHING,
    "Apparel & Accessories > Clothing > Lingerie > Bodysuits": ID_BODYSUITS,
    "Apparel & Accessories > Clothing > Swimwear": ID_SWIMWEAR,
    "Apparel & Accessories > Clothing > Men’s Clothing": ID_MENS_CLOTHING,
    "Apparel & Accessories > Clothing > Hosiery > Shapewear": ID_SHAPEWEAR,
    "Home & Garden > Linens & Bedding > Towels": ID_TOWELS,
    "Apparel & Accessories > Clothing > Hosiery": ID_HOSIERY,
})

_NUMERIC_RE = re.compile(r"^\d+$")


@dataclass(frozen=True)
class CategoryResolution:
    value: object
    matched_via: Optional[str] = None
    was_already_resolved: bool = False

    @property
    def mapped(self) -> bool:
        return self.matched_via is not None

    @property
    def unmapped(self) -> bool:
        return not self.mapped and not self.was_already_resolved


def _lookup(table: Mapping[str, object], s: str):
    if s in table:
        return table[s], "exact"
    key = fold(s)
    for label, value in table.items():
        if fold(label) == key:
            return value, "normalized"
    return None, None


@dataclass(frozen=True)
class CategoryTable:
    """Read-only label -> destination category lookup.

    ``id_kind`` is ``"taxonomy"`` for Shopify taxonomy gids (prefix match) or
    ``"numeric"`` for marketplaces that use integer category ids.
    """

    labels: Mapping[str, object]
    breadcrumbs: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))
    id_kind: str = "taxonomy"

    def is_destination_id(self, s: str) -> bool:
        if self.id_kind == "numeric":
            return bool(_NUMERIC_RE.match(s))
        return s.startswith(TAXONOMY_PREFIX)

    def resolve(self, raw) -> CategoryResolution:
        if is_blank(raw):
            return CategoryResolution(raw)
        s = text(raw)
        if self.is_destination_id(s):
            value = int(s) if self.id_kind == "numeric" else s
            return CategoryResolution(value, was_already_resolved=True)

        value, via = _lookup(self.labels, s)
        if via is None and self.breadcrumbs:
            value, via = _lookup(self.breadcrumbs, s)
            via = "breadcrumb" if via else None
        if via is None:
            return CategoryResolution(raw)
        if self.id_kind == "numeric":
            value = int(value)
        return CategoryResolution(value, matched_via=via)

    def id_to_breadcrumb(self) -> Dict[object, str]:
        return {v: crumb for crumb, v in self.breadcrumbs.items()}

    def to_breadcrumb(self, raw) -> CategoryResolution:
        """Resolve a label, taxonomy id or breadcrumb variant to the canonical breadcrumb."""
        if is_blank(raw):
            return CategoryResolution(raw)
        s = text(raw)
        if s in self.breadcrumbs:
            return CategoryResolution(s, was_already_resolved=True)

        inverse = self.id_to_breadcrumb()
        if self.is_destination_id(s):
            crumb = inverse.get(s)
            return CategoryResolution(crumb, matched_via="id") if crumb else CategoryResolution(raw)

        id_value, via = _lookup(self.labels, s)
        if via is not None:
            crumb = inverse.get(id_value)
            return CategoryResolution(crumb, matched_via=via) if crumb else CategoryResolution(raw)

        key = fold(s)
        for crumb in self.breadcrumbs:
            if fold(crumb) == key:
                return CategoryResolution(crumb, matched_via="breadcrumb")
        return CategoryResolution(raw)


def shopify_taxonomy_table() -> CategoryTable:
    return CategoryTable(RO_LABEL_TO_TAXONOMY, BREADCRUMB_TO_TAXONOMY, id_kind="taxonomy")


def load_category_map(path: Path | str | None) -> CategoryTable:
    """Load a ``{label: numeric id}`` JSON file as a numeric category table.

    A missing or unreadable file yields an empty table: every label then goes
    through the caller's unmapped policy.
    """
    data: Dict[str, int] = {}
    if path:
        p = Path(path)
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
            data = {str(k): int(v) for k, v in (raw or {}).items()}
            log.info("Loaded category map: %s (%d labels)", p, len(data))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            log.warning("Could not load category map at %s: %s", p, e)
    return CategoryTable(MappingProxyType(data), id_kind="numeric")


class UnmappedReport:
    """Counts of category labels that could not be resolved during a run."""

    def __init__(self) -> None:
        self._counts: Counter = Counter()

    def record(self, value) -> None:
        self._counts["" if value is None else str(value)] += 1

    def items(self):
        return list(self._counts.items())

    def as_dict(self) -> Dict[str, int]:
        return dict(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __bool__(self) -> bool:
        return bool(self._counts)

    def log_summary(self, logger: logging.Logger, context: str = "") -> None:
        if not self._counts:
            return
        logger.warning("Unmapped category values%s:", f" in {context}" if context else "")
        for value, count in self._counts.items():
            logger.warning('  - "%s" (%d rows)', value, count)
