from __future__ import annotations
import logging
import time
from typing import Dict, Iterator, List, Optional, Tuple

import requests
from requests.auth import HTTPBasicAuth

from .config import WooConfig


log = logging.getLogger(__name__)

MAX_PER_PAGE = 100
MAX_PAGE_FAILURES = 3


def clamp_per_page(per_page: int) -> int:
    return min(MAX_PER_PAGE, max(1, int(per_page)))


def build_session(cfg: WooConfig) -> requests.Session:
    s = requests.Session()
    s.auth = HTTPBasicAuth(cfg.consumer_key, cfg.consumer_secret)
    s.headers.update(
        {
            "Accept": "application/json",
            "User-Agent": "woo-shopify/1.0",
        }
    )
    return s


def _retry_after(resp: requests.Response, default: float) -> float:
    # Retry-After may also be an HTTP-date
    try:
        return max(0.0, float(resp.headers.get("Retry-After", default)))
    except (TypeError, ValueError):
        return default


class WooClient:
    """Sequential WooCommerce REST v3 client.

    Every request is issued and awaited one at a time. Only ``429`` responses
    are retried (honouring ``Retry-After``) up to ``cfg.max_retries`` times.
    """

    def __init__(self, cfg: WooConfig, session: Optional[requests.Session] = None) -> None:
        self.cfg = cfg
        self.session = session if session is not None else build_session(cfg)

    def _get(self, path: str, params: Optional[Dict] = None) -> requests.Response:
        url = f"{self.cfg.api_url}/{path.lstrip('/')}"
        backoff = 1.0
        attempt = 0
        while True:
            resp = self.session.get(url, params=params, timeout=self.cfg.timeout)
            if resp.status_code == 429 and attempt < self.cfg.max_retries:
                attempt += 1
                retry_after = _retry_after(resp, backoff)
                log.warning("Rate limited on %s, retrying in %.1fs (%d/%d)", path, retry_after, attempt, self.cfg.max_retries)
                time.sleep(retry_after)
                backoff = min(backoff * 2, 10.0)
                continue
            return resp

    def get_json(self, path: str, params: Optional[Dict] = None):
        resp = self._get(path, params)
        resp.raise_for_status()
        return resp.json()

    def resolve_category_id(self, slug: str) -> str:
        """Category id for ``slug``; empty when unknown or the lookup fails."""
        if not slug:
            return ""
        log.info("Resolving category slug: %s", slug)
        try:
            cats = self.get_json("products/categories", {"slug": slug})
        except requests.RequestException as e:
            log.warning("Category resolve request failed for %s: %s", slug, e)
            return ""
        if cats and (cats[0] or {}).get("id"):
            category_id = str(cats[0]["id"])
            log.info("Category ID: %s", category_id)
            return category_id
        log.info("No category found for slug %s", slug)
        return ""

    def list_products(self, page: int, per_page: int = MAX_PER_PAGE, status: str = "publish", category: str = "") -> List[Dict]:
        params: Dict[str, object] = {"per_page": clamp_per_page(per_page), "page": page, "status": status}
        if category:
            params["category"] = category
        return self.get_json("products", params) or []

    def fetch_variations(self, product_id, per_page: int = MAX_PER_PAGE) -> List[Dict]:
        return self.get_json(f"products/{product_id}/variations", {"per_page": clamp_per_page(per_page)}) or []

    def fetch_variation(self, product_id, variation_id) -> Dict:
        return self.get_json(f"products/{product_id}/variations/{variation_id}") or {}

    def list_customers(self, page: int, per_page: int = MAX_PER_PAGE) -> List[Dict]:
        params = {
            "per_page": clamp_per_page(per_page),
            "page": page,
            "role": "customer",
            "orderby": "id",
            "order": "asc",
        }
        return self.get_json("customers", params) or []

    def iter_product_pages(
        self,
        per_page: int = MAX_PER_PAGE,
        status: str = "publish",
        category: str = "",
        start_page: int = 1,
        failed_pages: Optional[List[int]] = None,
    ) -> Iterator[Tuple[int, List[Dict]]]:
        per_page = clamp_per_page(per_page)
        yield from _paginate(
            lambda page: self.list_products(page, per_page, status, category),
            per_page,
            start_page,
            "products",
            failed_pages,
        )

    def collect_products(self, per_page: int = MAX_PER_PAGE, status: str = "publish", category: str = "", limit: int = 0) -> List[Dict]:
        """All products across pages, stopping early once ``limit`` (> 0) is reached."""
        out: List[Dict] = []
        for _, products in self.iter_product_pages(per_page, status, category):
            out.extend(products)
            if limit > 0 and len(out) >= limit:
                return out[:limit]
        return out

    def iter_customer_pages(
        self,
        per_page: int = MAX_PER_PAGE,
        start_page: int = 1,
        failed_pages: Optional[List[int]] = None,
    ) -> Iterator[Tuple[int, List[Dict]]]:
        per_page = clamp_per_page(per_page)
        yield from _paginate(lambda page: self.list_customers(page, per_page), per_page, start_page, "customers", failed_pages)


def _paginate(
    fetch,
    per_page: int,
    start_page: int,
    what: str,
    failed_pages: Optional[List[int]] = None,
) -> Iterator[Tuple[int, List[Dict]]]:
    """Yield ``(page, records)`` until a page comes back shorter than ``per_page``.

    A failure on the first page propagates. A failure on a later page is
    logged, appended to ``failed_pages`` and skipped. The listing ends after
    ``MAX_PAGE_FAILURES`` consecutive failed pages.
    """
    page = max(1, int(start_page))
    first = True
    failures = 0
    while True:
        log.info("Fetching %s page %d...", what, page)
        try:
            records = fetch(page)
        except requests.RequestException as e:
            if first:
                raise
            failures += 1
            if failed_pages is not None:
                failed_pages.append(page)
            if failures >= MAX_PAGE_FAILURES:
                log.error("Failed to fetch %s page %d: %s; giving up after %d failed pages in a row", what, page, e, failures)
                return
            log.error("Failed to fetch %s page %d: %s; skipping it", what, page, e)
            page += 1
            continue
        first = False
        failures = 0
        log.info("Page %d: %d %s", page, len(records), what)
        if not records:
            return
        yield page, records
        if len(records) < per_page:
            return
        page += 1
