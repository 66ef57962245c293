from __future__ import annotations
import math
import unicodedata
from decimal import Decimal, ROUND_HALF_UP
from types import MappingProxyType


# Romanian/Italian colour labels seen in the store -> the names marketplaces expect
COLOR_VALUE_MAP = MappingProxyType({
    "nero": "Black",
    "negru": "Black",
    "black": "Black",
    "alb": "White",
    "white": "White",
    "nude": "Beige",
    "bej": "Beige",
    "bleumarin": "Navy",
    "navy": "Navy",
    "albastru": "Blue",
    "rosu": "Red",
})

COLOR_ALIASES = ("color", "culoare")
SIZE_ALIASES = ("size", "marime", "mărime")


def is_blank(v) -> bool:
    return v is None or (isinstance(v, str) and v.strip() == "")


def text(v) -> str:
    return "" if v is None else str(v).strip()


def fold(s) -> str:
    """Trim, decompose, drop combining marks and lowercase."""
    s = unicodedata.normalize("NFD", text(s))
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return s.lower()


def normalize_option_name(name) -> str:
    lower = text(name).lower()
    if any(k in lower for k in COLOR_ALIASES):
        return "Color"
    if any(k in lower for k in SIZE_ALIASES):
        return "Size"
    return text(name)


def normalize_color(value) -> str:
    return COLOR_VALUE_MAP.get(fold(value)) or text(value)


def _number(v) -> float | None:
    if isinstance(v, bool):
        return float(v)
    if isinstance(v, (int, float)):
        n = float(v)
    else:
        s = text(v)
        if not s:
            return None
        try:
            n = float(s)
        except ValueError:
            return None
    return n if math.isfinite(n) else None


def safe_float(v, default: float = 0.0) -> float:
    n = _number(v)
    return default if n is None else n


def safe_int(v, default: int = 0) -> int:
    n = _number(v)
    return default if n is None else int(n)


def to_price(v, default=None):
    """Non-negative price rounded to cents, or ``default``."""
    n = _number(v)
    if n is None or n < 0:
        return default
    return float(Decimal(str(n)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def to_stock(v, default: int = 0) -> int:
    n = _number(v)
    if n is None:
        return default
    return max(0, int(n))


def kg_to_grams(v) -> int:
    n = _number(v)
    if n is None:
        return 0
    return int(Decimal(str(n * 1000)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def first_present(*values) -> str:
    """First value that is not None/empty, as a string."""
    for v in values:
        if v is not None and v != "":
            return str(v)
    return ""
