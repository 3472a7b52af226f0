"""Service provider helpers for wiring OrderService with ports.

``get_order_service`` returns a configured ``OrderService``. When
``settings.USE_HTTP_ADAPTERS`` is enabled the catalog is reached over HTTP
and, if ``settings.ORDER_EVENTS_URL`` is set, order-created events are
posted to that webhook. Otherwise the service falls back to the fast
in-process stubs suitable for tests and local development.
"""

from django.conf import settings

from .adapters import CatalogStub, LoggingOrderEventPublisher
from .domain import CatalogPort, OrderEventPublisher, OrderService
from .http_adapters import HttpCatalogClient, HttpOrderEventPublisher
from .repository import OrderRepository


def get_catalog() -> CatalogPort:
    """Return the catalog port selected by ``USE_HTTP_ADAPTERS``."""
    if getattr(settings, "USE_HTTP_ADAPTERS", True):
        return HttpCatalogClient()
    return CatalogStub()


def get_event_publisher() -> OrderEventPublisher:
    """Return the webhook publisher when configured, else the logging one."""
    if getattr(settings, "USE_HTTP_ADAPTERS", True) and getattr(settings, "ORDER_EVENTS_URL", ""):
        return HttpOrderEventPublisher()
    return LoggingOrderEventPublisher()


def get_order_service() -> OrderService:
    """Return a configured OrderService instance.

    Returns:
        OrderService: A service wired with the selected catalog, the ORM
        repository and the selected event publisher.
    """
    return OrderService(
        catalog=get_catalog(),
        repository=OrderRepository(),
        publisher=get_event_publisher(),
        delivery_estimate_minutes=getattr(settings, "ORDER_DELIVERY_ESTIMATE_MINUTES", 45),
    )
