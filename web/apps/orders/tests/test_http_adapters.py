"""Unit tests for the HTTP adapters to the catalog and the event webhook.

These tests verify that the HTTP clients handle success, business failures
and network errors correctly by monkeypatching ``httpx.Client`` methods and
asserting the adapter behavior.
"""
import uuid
from datetime import datetime, timezone

import httpx, pytest
from gateway.middleware import REQUEST_ID_CTX
from orders.domain import Address, LineItem, Order, OrderStatus, Pizza
from orders.http_adapters import HttpCatalogClient, HttpOrderEventPublisher, UpstreamReplyError, _catalog_cb


class DummyResp:
    """Minimal httpx-like response stub for adapter tests.

    Args:
        status_code (int): HTTP status code to simulate.
        json_data (dict | None): JSON body to return from ``json()``.
    """
    def __init__(self, status_code=200, json_data=None):
        self.status_code = status_code
        self._json = json_data or {}
    def raise_for_status(self):
        if self.status_code >= 400:
            raise httpx.HTTPStatusError("err", request=None, response=None)
    def json(self): return self._json


def stored_order():
    return Order(
        id=uuid.uuid4(),
        items=[LineItem(amount=2, pizza=Pizza(id=1), price_cents=890)],
        delivery_address=Address("Mathias", "Dpunkt", "Somestreet 1", "Hamburg", "22305", "+49404321343"),
        status=OrderStatus.NEW,
        ordered_at=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
    )


def test_catalog_get_pizza_ok(monkeypatch, pizza_salami_json):
    """Catalog adapter parses the pizza on 200."""
    seen = {}
    def fake_get(self, url, headers=None, **kw):
        seen["url"] = url
        return DummyResp(200, pizza_salami_json)
    monkeypatch.setattr(httpx.Client, "get", fake_get, raising=True)

    pizza = HttpCatalogClient(base_url="http://localhost").get_pizza(1)

    assert seen["url"] == "http://localhost/catalog/1"
    assert pizza.id == 1
    assert pizza.name == "Pizza Salami"
    assert pizza.image_url.endswith("pizza.jpg")
    assert pizza.price_cents == 890
    assert pizza.currency == "EUR"


def test_catalog_get_pizza_not_found(monkeypatch):
    """Catalog adapter returns None on 404."""
    monkeypatch.setattr(httpx.Client, "get", lambda self, url, headers=None, **kw: DummyResp(404), raising=True)
    assert HttpCatalogClient(base_url="http://localhost").get_pizza(999) is None


def test_catalog_network_error(monkeypatch, settings):
    """Catalog adapter propagates network errors from httpx once retries are spent."""
    settings.HTTP_RETRY_MAX = 0
    def fake_get(self, url, headers=None, **kw):
        raise httpx.ConnectError("boom")
    monkeypatch.setattr(httpx.Client, "get", fake_get, raising=True)
    with pytest.raises(httpx.ConnectError):
        HttpCatalogClient(base_url="http://localhost").get_pizza(1)


def test_catalog_propagates_request_id(monkeypatch, pizza_salami_json):
    seen = {}
    def fake_get(self, url, headers=None, **kw):
        seen.update(headers or {})
        return DummyResp(200, pizza_salami_json)
    monkeypatch.setattr(httpx.Client, "get", fake_get, raising=True)

    token = REQUEST_ID_CTX.set("rid-42")
    try:
        HttpCatalogClient(base_url="http://localhost").get_pizza(1)
    finally:
        REQUEST_ID_CTX.reset(token)
    assert seen["X-Request-ID"] == "rid-42"
    assert seen["X-Circuit-State"] == "CLOSED"


def test_event_publisher_posts_order_created(monkeypatch):
    sent = {}
    def fake_post(self, url, json=None, headers=None, **kw):
        sent["url"] = url
        sent["json"] = json
        return DummyResp(202)
    monkeypatch.setattr(httpx.Client, "post", fake_post, raising=True)

    order = stored_order()
    HttpOrderEventPublisher(url="http://events/orders").send_order_created_event(order)

    assert sent["url"] == "http://events/orders"
    assert sent["json"]["event_type"] == "OrderCreated"
    assert sent["json"]["order_id"] == str(order.id)
    assert sent["json"]["total_price"] == "EUR 17.80"
    assert sent["json"]["delivery_city"] == "Hamburg"
    assert sent["json"]["items"] == [{"pizza_id": 1, "amount": 2, "price": "EUR 8.90"}]


def test_event_publisher_raises_on_client_error(monkeypatch):
    monkeypatch.setattr(httpx.Client, "post", lambda self, url, json=None, headers=None, **kw: DummyResp(400), raising=True)
    with pytest.raises(httpx.HTTPStatusError):
        HttpOrderEventPublisher(url="http://events/orders").send_order_created_event(stored_order())


def test_providers_pick_http_adapters(settings):
    from orders import providers

    settings.USE_HTTP_ADAPTERS = True
    settings.ORDER_EVENTS_URL = "http://events/orders"
    assert isinstance(providers.get_catalog(), HttpCatalogClient)
    assert isinstance(providers.get_event_publisher(), HttpOrderEventPublisher)

    settings.ORDER_EVENTS_URL = ""
    assert not isinstance(providers.get_event_publisher(), HttpOrderEventPublisher)


@pytest.mark.parametrize(
    "body",
    [
        {"name": "Pizza Salami"},
        {"name": "Pizza Salami", "price": {"currency": "EUR"}},
        {"name": "Pizza Salami", "price": {"amount": "abc", "currency": "EUR"}},
        {"name": "Pizza Salami", "price": {"amount": 8.9}},
    ],
)
def test_catalog_rejects_reply_without_usable_price(monkeypatch, body):
    """A 200 without a usable price is a broken reply, not a free pizza."""
    monkeypatch.setattr(httpx.Client, "get", lambda self, url, headers=None, **kw: DummyResp(200, body), raising=True)
    with pytest.raises(UpstreamReplyError):
        HttpCatalogClient(base_url="http://localhost").get_pizza(1)
    assert _catalog_cb.state == "CLOSED"


def test_catalog_rejects_non_json_reply(monkeypatch):
    def fake_get(self, url, headers=None, **kw):
        return httpx.Response(200, text="<html>oops</html>", request=httpx.Request("GET", url))
    monkeypatch.setattr(httpx.Client, "get", fake_get, raising=True)
    with pytest.raises(UpstreamReplyError):
        HttpCatalogClient(base_url="http://localhost").get_pizza(1)
