"""HAL (``application/hal+json``) rendering for the orders API.

Builds the hypermedia representations served by the views: a single order
with its ``self`` link and per-item ``pizza`` links, and a zero-based page
of orders with ``_embedded``, ``page`` and navigation ``_links``.
"""

from urllib.parse import urlencode

from django.conf import settings
from django.urls import reverse
from rest_framework.renderers import JSONRenderer

from .domain import Order, OrderPage, format_money
from .schemas import (
    AddressReadDTO,
    LineItemReadDTO,
    Link,
    OrderReadDTO,
    PageMetadata,
)

HAL_JSON = "application/hal+json"


class HalJSONRenderer(JSONRenderer):
    """JSON renderer advertised as ``application/hal+json``."""

    media_type = HAL_JSON


def orders_collection_uri(request) -> str:
    return request.build_absolute_uri(reverse("orders:orders-collection"))


def order_uri(request, order_id) -> str:
    return request.build_absolute_uri(reverse("orders:orders-detail", kwargs={"oid": order_id}))


def pizza_uri(pizza_id: int) -> str:
    """Link to a pizza on the catalog service."""
    base = getattr(settings, "CATALOG_BASE_URL", "http://localhost").rstrip("/")
    return f"{base}/catalog/{pizza_id}"


def order_representation(request, order: Order) -> dict:
    """Return the HAL dict for one order."""
    addr = order.delivery_address
    dto = OrderReadDTO(
        status=order.status.value,
        ordered_at=order.ordered_at,
        total_price=format_money(order.total_cents, order.currency),
        estimated_time_of_delivery=order.estimated_time_of_delivery,
        comment=order.comment,
        order_items=[
            LineItemReadDTO(
                amount=it.amount,
                price=format_money(it.price_cents, it.currency),
                links={"pizza": Link(href=pizza_uri(it.pizza.id))},
            )
            for it in order.items
        ],
        delivery_address=AddressReadDTO(
            firstname=addr.firstname,
            lastname=addr.lastname,
            street=addr.street,
            city=addr.city,
            postal_code=addr.postal_code,
            telephone=addr.telephone,
            email=addr.email,
        ),
        links={"self": Link(href=order_uri(request, order.id))},
    )
    return dto.model_dump(mode="json", by_alias=True)


def _page_href(base: str, number: int, size: int) -> str:
    return f"{base}?{urlencode({'page': number, 'size': size})}"


def page_links(request, page: OrderPage) -> dict:
    """Navigation links for a page: self, first, last and, when they exist, prev/next."""
    base = orders_collection_uri(request)
    last = max(page.total_pages - 1, 0)
    links = {
        "self": {"href": _page_href(base, page.number, page.size)},
        "first": {"href": _page_href(base, 0, page.size)},
    }
    if page.number > 0:
        links["prev"] = {"href": _page_href(base, min(page.number - 1, last), page.size)}
    if page.number < last:
        links["next"] = {"href": _page_href(base, page.number + 1, page.size)}
    links["last"] = {"href": _page_href(base, last, page.size)}
    return links


def page_representation(request, page: OrderPage) -> dict:
    """Return the HAL dict for a page of orders."""
    meta = PageMetadata(
        size=page.size,
        total_elements=page.total_elements,
        total_pages=page.total_pages,
        number=page.number,
    )
    return {
        "_embedded": {"orders": [order_representation(request, o) for o in page.items]},
        "page": meta.model_dump(by_alias=True),
        "_links": page_links(request, page),
    }
