# Make 'orders' and 'monitoring' (inside web/apps) importable before collection
import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parent  # .../web
APPS_DIR = BASE_DIR / "apps"
p = str(APPS_DIR)
if p not in sys.path:
    sys.path.insert(0, p)


@pytest.fixture
def pizza_salami_json():
    """Catalog service answer for pizza 1."""
    return {
        "name": "Pizza Salami",
        "description": "The classic - Pizza Salami",
        "imageUrl": "http://www.sardegna-rustica.de/images/pizza.jpg",
        "price": {"amount": 8.90, "currency": "EUR"},
    }


@pytest.fixture(autouse=True)
def use_stubs_for_tests(settings):
    settings.USE_HTTP_ADAPTERS = False
    settings.ORDER_EVENTS_URL = ""
    settings.CATALOG_BASE_URL = "http://localhost"


@pytest.fixture(autouse=True)
def reset_throttles_and_circuits():
    from django.core.cache import cache
    from orders.http_adapters import _catalog_cb, _events_cb

    cache.clear()
    _catalog_cb.on_success()
    _events_cb.on_success()
    yield


class RecordingPublisher:
    """Event publisher that remembers every order it was handed."""

    def __init__(self):
        self.sent = []

    def send_order_created_event(self, order):
        self.sent.append(order)


@pytest.fixture
def publisher(monkeypatch):
    rec = RecordingPublisher()
    monkeypatch.setattr("orders.providers.get_event_publisher", lambda: rec, raising=True)
    return rec


@pytest.fixture
def order_payload():
    return {
        "comment": "Some comment",
        "deliveryAddress": {
            "firstname": "Mathias",
            "lastname": "Dpunkt",
            "street": "Somestreet 1",
            "city": "Hamburg",
            "telephone": "+49404321343",
            "postalCode": "22305",
            "email": "your@email.address",
        },
        "orderItems": [
            {"amount": 1, "pizza": "http://localhost/com.epages.microservice.handson.catalog/1"},
        ],
    }
