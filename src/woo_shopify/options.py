from __future__ import annotations
from typing import Dict, Iterable, List, Tuple

from .catalog import OPTION_SLOTS
from .normalize import normalize_option_name, text


MAX_OPTIONS = 3

OptionNames = Tuple[str, str, str]
EMPTY_OPTIONS: OptionNames = ("", "", "")


def _reconcile(pairs_per_item: Iterable[Iterable[Tuple[str, str]]]) -> OptionNames:
    order: List[str] = []
    has_value: Dict[str, bool] = {}
    for pairs in pairs_per_item:
        for raw_name, raw_value in pairs:
            name = normalize_option_name(raw_name)
            if not name:
                continue
            if name not in order:
                order.append(name)
            if text(raw_value):
                has_value[name] = True

    names = [n for n in order if has_value.get(n)][:MAX_OPTIONS]
    names += [""] * (MAX_OPTIONS - len(names))
    return tuple(names)  # type: ignore[return-value]


def _variation_pairs(variation: dict):
    for attr in variation.get("attributes") or []:
        attr = attr or {}
        yield attr.get("name") or "", attr.get("option")


def _row_pairs(row: dict):
    for i in OPTION_SLOTS:
        yield row.get(f"Option{i} Name") or "", row.get(f"Option{i} Value")


def reconcile_option_names(variations: Iterable[dict]) -> OptionNames:
    """Option schema shared by all WooCommerce variations of one product.

    Names are aliased (colour/size labels collapse to ``Color``/``Size``),
    kept in first-seen order, restricted to names that carry at least one
    non-blank value, capped at three and padded with empty slots.
    """
    return _reconcile(_variation_pairs(v or {}) for v in variations)


def reconcile_row_options(rows: Iterable[dict]) -> OptionNames:
    """Same as :func:`reconcile_option_names` for Shopify CSV rows."""
    return _reconcile(_row_pairs(r) for r in rows)


def variation_option_values(variation: dict, option_names: OptionNames) -> Tuple[str, str, str]:
    values = {normalize_option_name(n): text(v) for n, v in _variation_pairs(variation or {})}
    return tuple(values.get(n, "") if n else "" for n in option_names)  # type: ignore[return-value]


def row_option_values(row: dict, option_names: OptionNames) -> Tuple[str, str, str]:
    values = {normalize_option_name(n): text(v) for n, v in _row_pairs(row)}
    return tuple(values.get(n, "") if n else "" for n in option_names)  # type: ignore[return-value]
