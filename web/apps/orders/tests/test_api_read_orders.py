"""API tests for reading orders: a single order and the HAL collection."""
import uuid

import pytest
from orders.domain import Address, LineItem, Order, Pizza
from orders.providers import get_order_service
from orders.repository import OrderRepository

DETAIL_URL = "/api/orders/{oid}/"
LIST_URL = "/api/orders/"
HAL = "application/hal+json"


def existing_order():
    """Create an order through the service, the way a client order would be."""
    order = Order(
        id=None,
        comment="some comment",
        delivery_address=Address(
            firstname="Mathias",
            lastname="Dpunkt",
            street="Pilatuspool 2",
            city="Hamburg",
            postal_code="22222",
            telephone="+4908154711",
        ),
    )
    order.add_item(LineItem(amount=2, pizza=Pizza(id=1), price_cents=123))
    return get_order_service().create(order)


@pytest.mark.django_db
def test_get_order_returns_200_and_payload(client, publisher):
    order = existing_order()
    r = client.get(DETAIL_URL.format(oid=order.id), HTTP_ACCEPT=HAL)
    assert r.status_code == 200
    assert r["Content-Type"].startswith(HAL)
    body = r.json()
    assert body["status"] == order.status.value
    assert body["totalPrice"] == "EUR 17.80"
    assert len(body["orderItems"]) == len(order.items)
    assert body["deliveryAddress"]["firstname"] == "Mathias"
    assert body["_links"]["self"]["href"] == f"http://testserver/api/orders/{order.id}/"


@pytest.mark.django_db
def test_get_order_documents_all_fields(client, publisher):
    order = existing_order()
    body = client.get(DETAIL_URL.format(oid=order.id), HTTP_ACCEPT=HAL).json()
    assert set(body) == {
        "status",
        "orderedAt",
        "totalPrice",
        "estimatedTimeOfDelivery",
        "comment",
        "orderItems",
        "deliveryAddress",
        "_links",
    }
    item = body["orderItems"][0]
    assert set(item) == {"amount", "price", "_links"}
    assert item["amount"] == 2
    assert item["price"] == "EUR 8.90"
    assert item["_links"]["pizza"]["href"] == "http://localhost/catalog/1"
    assert body["deliveryAddress"]["postalCode"] == "22222"


@pytest.mark.django_db
def test_get_order_accepts_plain_json(client, publisher):
    order = existing_order()
    r = client.get(DETAIL_URL.format(oid=order.id), HTTP_ACCEPT="application/json")
    assert r.status_code == 200
    assert r["Content-Type"].startswith("application/json")


@pytest.mark.django_db
def test_get_order_not_found_returns_404(client):
    r = client.get(DETAIL_URL.format(oid=uuid.uuid4()))
    assert r.status_code == 404
    assert r.json()["detail"] == "NOT_FOUND"


@pytest.mark.django_db
def test_list_orders_returns_hal_page(client, publisher):
    existing_order()
    r = client.get(LIST_URL, HTTP_ACCEPT=HAL)
    assert r.status_code == 200
    body = r.json()
    assert {"_embedded", "page", "_links"} <= set(body)
    assert len(body["_embedded"]["orders"]) == 1
    assert body["page"] == {"size": 20, "totalElements": 1, "totalPages": 1, "number": 0}
    assert body["_links"]["self"]["href"] == "http://testserver/api/orders/?page=0&size=20"
    assert "next" not in body["_links"]


@pytest.mark.django_db
def test_list_orders_paging_links(client, publisher):
    created = [existing_order() for _ in range(3)]
    body = client.get(LIST_URL, {"page": 1, "size": 1}).json()
    assert body["page"] == {"size": 1, "totalElements": 3, "totalPages": 3, "number": 1}
    links = body["_links"]
    assert links["first"]["href"].endswith("?page=0&size=1")
    assert links["prev"]["href"].endswith("?page=0&size=1")
    assert links["next"]["href"].endswith("?page=2&size=1")
    assert links["last"]["href"].endswith("?page=2&size=1")
    # newest first
    assert body["_embedded"]["orders"][0]["_links"]["self"]["href"].endswith(f"/{created[1].id}/")


@pytest.mark.django_db
def test_list_orders_page_past_the_end_is_empty(client, publisher):
    existing_order()
    body = client.get(LIST_URL, {"page": 5}).json()
    assert body["_embedded"]["orders"] == []
    assert body["page"]["number"] == 5


@pytest.mark.django_db
def test_list_orders_rejects_bad_paging(client):
    assert client.get(LIST_URL, {"page": "x"}).status_code == 400
    assert client.get(LIST_URL, {"size": -1}).status_code == 400


@pytest.mark.django_db
def test_list_orders_caps_page_size(client, settings):
    settings.ORDERS_MAX_PAGE_SIZE = 5
    body = client.get(LIST_URL, {"size": 500}).json()
    assert body["page"]["size"] == 5


@pytest.mark.django_db
def test_delete_all_leaves_collection_empty(client, publisher):
    existing_order()
    existing_order()
    assert OrderRepository().delete_all() == 2
    body = client.get(LIST_URL).json()
    assert body["_embedded"]["orders"] == []
    assert body["page"]["totalElements"] == 0
    assert body["page"]["totalPages"] == 0
