"""In-process adapters for the orders domain ports.

``CatalogStub`` implements ``CatalogPort`` without any network calls and
``LoggingOrderEventPublisher`` hands order-created events to the logging
system instead of a remote listener. They are used by unit tests and local
development where deterministic behavior is useful and the catalog service
or an event consumer is not running.
"""

import logging
from typing import Dict, Optional

from .domain import CatalogPort, Order, OrderEventPublisher, Pizza
from .events import OrderCreatedEvent

logger = logging.getLogger("orders.events")

DEFAULT_MENU: Dict[int, Pizza] = {
    1: Pizza(
        id=1,
        name="Pizza Salami",
        description="The classic - Pizza Salami",
        image_url="http://www.sardegna-rustica.de/images/pizza.jpg",
        price_cents=890,
        currency="EUR",
    ),
    2: Pizza(
        id=2,
        name="Pizza Margherita",
        description="Tomato, mozzarella, basil",
        image_url="http://localhost/images/margherita.jpg",
        price_cents=750,
        currency="EUR",
    ),
    3: Pizza(
        id=3,
        name="Pizza Funghi",
        description="Mushrooms and mozzarella",
        image_url="http://localhost/images/funghi.jpg",
        price_cents=850,
        currency="EUR",
    ),
}


class CatalogStub(CatalogPort):
    """Stub implementation of ``CatalogPort`` backed by a fixed menu.

    Args:
        menu: Pizzas by id. Defaults to ``DEFAULT_MENU``.
    """

    def __init__(self, menu: Optional[Dict[int, Pizza]] = None):
        self.menu = dict(DEFAULT_MENU if menu is None else menu)

    def get_pizza(self, pizza_id: int) -> Optional[Pizza]:
        """Return the pizza from the menu, or None when it is not on it."""
        return self.menu.get(pizza_id)


class LoggingOrderEventPublisher(OrderEventPublisher):
    """Publisher that writes each order-created event as one log record."""

    def send_order_created_event(self, order: Order) -> None:
        event = OrderCreatedEvent.from_order(order)
        logger.info("order created event", extra={"event": event.model_dump(mode="json")})
