"""
Unit tests for woo_shopify/woocommerce.py
"""

import pytest
import requests

from woo_shopify.woocommerce import WooClient, clamp_per_page

from tests.fakes import FakeResponse, FakeSession


class TestClampPerPage:
    """Tests for clamp_per_page."""

    def test_bounds(self):
        """Per-page is kept between 1 and 100."""
        assert clamp_per_page(500) == 100
        assert clamp_per_page(0) == 1
        assert clamp_per_page("25") == 25


class TestRequests:
    """Tests for request building and retries."""

    def test_url_params_and_timeout(self, make_woo_client):
        """Requests target the v3 API with an explicit timeout."""
        client, session = make_woo_client({"/products": FakeResponse([])})
        client.list_products(2, per_page=10, status="draft", category="5")
        method, url, kwargs = session.calls[0]
        assert method == "GET"
        assert url == "https://shop.example/wp-json/wc/v3/products"
        assert kwargs["params"] == {"per_page": 10, "page": 2, "status": "draft", "category": "5"}
        assert kwargs["timeout"] == 5.0

    def test_retries_429(self, make_woo_client, monkeypatch):
        """A 429 is retried after Retry-After seconds."""
        sleeps = []
        monkeypatch.setattr("woo_shopify.woocommerce.time.sleep", sleeps.append)
        client, session = make_woo_client({
            "/customers": [FakeResponse(status_code=429, headers={"Retry-After": "2"}), FakeResponse([{"id": 1}])],
        })
        assert client.list_customers(1) == [{"id": 1}]
        assert sleeps == [2.0]
        assert len(session.calls) == 2

    def test_retry_after_http_date(self, make_woo_client, monkeypatch):
        """A non-numeric Retry-After falls back to the backoff delay."""
        sleeps = []
        monkeypatch.setattr("woo_shopify.woocommerce.time.sleep", sleeps.append)
        limited = FakeResponse(status_code=429, headers={"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"})
        client, _ = make_woo_client({"/customers": [limited, FakeResponse([{"id": 1}])]})
        assert client.list_customers(1) == [{"id": 1}]
        assert sleeps == [1.0]

    def test_retry_limit(self, make_woo_client, monkeypatch):
        """Retries stop after max_retries and the error surfaces."""
        monkeypatch.setattr("woo_shopify.woocommerce.time.sleep", lambda s: None)
        client, session = make_woo_client({"/customers": FakeResponse(status_code=429)})
        with pytest.raises(requests.HTTPError):
            client.list_customers(1)
        assert len(session.calls) == 1 + client.cfg.max_retries

    def test_other_errors_not_retried(self, make_woo_client):
        """Server errors are raised at once."""
        client, session = make_woo_client({"/products": FakeResponse(status_code=500)})
        with pytest.raises(requests.HTTPError):
            client.list_products(1)
        assert len(session.calls) == 1

    def test_customers_params(self, make_woo_client):
        """Customer listing asks for customers ordered by id."""
        client, session = make_woo_client({"/customers": FakeResponse([])})
        client.list_customers(3, per_page=50)
        params = session.calls[0][2]["params"]
        assert params == {"per_page": 50, "page": 3, "role": "customer", "orderby": "id", "order": "asc"}


class TestResolveCategory:
    """Tests for resolve_category_id."""

    def test_found(self, make_woo_client):
        """A known slug resolves to its id as a string."""
        client, _ = make_woo_client({"/products/categories": FakeResponse([{"id": 17, "slug": "body"}])})
        assert client.resolve_category_id("body") == "17"

    def test_not_found(self, make_woo_client):
        """Unknown slugs give an empty id."""
        client, _ = make_woo_client({"/products/categories": FakeResponse([])})
        assert client.resolve_category_id("nope") == ""

    def test_failure(self, make_woo_client):
        """A failing lookup gives an empty id."""
        client, _ = make_woo_client({"/products/categories": requests.ConnectionError("down")})
        assert client.resolve_category_id("body") == ""

    def test_empty_slug(self, make_woo_client):
        """No request is made for an empty slug."""
        client, session = make_woo_client({})
        assert client.resolve_category_id("") == ""
        assert session.calls == []


class TestPagination:
    """Tests for page iteration."""

    def test_stops_on_short_page(self, make_woo_client):
        """A page shorter than per_page is the last one."""
        client, session = make_woo_client({
            "/products": [FakeResponse([{"id": 1}, {"id": 2}]), FakeResponse([{"id": 3}])],
        })
        pages = list(client.iter_product_pages(per_page=2))
        assert pages == [(1, [{"id": 1}, {"id": 2}]), (2, [{"id": 3}])]
        assert len(session.calls) == 2

    def test_stops_on_empty_page(self, make_woo_client):
        """An empty page ends the listing."""
        client, _ = make_woo_client({"/customers": [FakeResponse([{"id": 1}]), FakeResponse([])]})
        assert list(client.iter_customer_pages(per_page=1)) == [(1, [{"id": 1}])]

    def test_first_page_failure_raises(self, make_woo_client):
        """A failure on the first page aborts."""
        client, _ = make_woo_client({"/products": FakeResponse(status_code=401)})
        with pytest.raises(requests.HTTPError):
            list(client.iter_product_pages())

    def test_later_page_failure_is_skipped(self, make_woo_client):
        """A failed later page is recorded and the next page is fetched."""
        client, session = make_woo_client({
            "/products": [
                FakeResponse([{"id": 1}]),
                requests.ConnectionError("reset"),
                FakeResponse([{"id": 2}]),
                FakeResponse([]),
            ],
        })
        failed = []
        pages = list(client.iter_product_pages(per_page=1, failed_pages=failed))
        assert pages == [(1, [{"id": 1}]), (3, [{"id": 2}])]
        assert failed == [2]
        assert [c[2]["params"]["page"] for c in session.calls] == [1, 2, 3, 4]

    def test_gives_up_after_consecutive_failures(self, make_woo_client):
        """Three failed pages in a row end the listing."""
        client, session = make_woo_client({
            "/customers": [FakeResponse([{"id": 1}]), requests.ConnectionError("reset")],
        })
        failed = []
        assert list(client.iter_customer_pages(per_page=1, failed_pages=failed)) == [(1, [{"id": 1}])]
        assert failed == [2, 3, 4]
        assert len(session.calls) == 4

    def test_start_page(self, make_woo_client):
        """Iteration can begin on a later page."""
        client, session = make_woo_client({"/products": FakeResponse([])})
        list(client.iter_product_pages(start_page=4))
        assert session.calls[0][2]["params"]["page"] == 4

    def test_collect_products_limit(self, make_woo_client):
        """collect_products stops at the limit."""
        client, _ = make_woo_client({
            "/products": [FakeResponse([{"id": 1}, {"id": 2}]), FakeResponse([{"id": 3}, {"id": 4}])],
        })
        assert [p["id"] for p in client.collect_products(per_page=2, limit=3)] == [1, 2, 3]


def test_variations_path(woo_config):
    """Variations are fetched per product."""
    session = FakeSession({"/products/42/variations": FakeResponse([{"id": 101}])})
    client = WooClient(woo_config, session=session)
    assert client.fetch_variations(42) == [{"id": 101}]
    assert session.calls[0][2]["params"] == {"per_page": 100}
