"""Domain models, ports and service for pizza orders.

This module contains the dataclasses that make up the order aggregate,
protocol definitions (ports) for the collaborators the service relies on
(the pizza catalog, the order repository and the event publisher), and the
domain service that creates and reads orders.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional, Protocol

logger = logging.getLogger("orders.service")

DEFAULT_CURRENCY = "EUR"


# ---- Enums ----
class OrderStatus(str, Enum):
    """Enumeration of the possible order statuses.
    New orders start as NEW; the later states are set by the bakery and
    delivery services."""

    NEW = "NEW"
    PAID = "PAID"
    BAKING = "BAKING"
    DELIVERING = "DELIVERING"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# ---- Money helpers ----
def to_cents(amount) -> int:
    """Convert a decimal amount (e.g. ``8.90``) to integer minor units."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return int(value * 100)


def format_money(cents: int, currency: str) -> str:
    """Render minor units as ``"<CUR> <amount>"``, e.g. ``"EUR 8.90"``."""
    return f"{currency} {Decimal(cents) / 100:.2f}"


# ---- Entities / DTOs ----
@dataclass(frozen=True)
class Address:
    """Delivery address of an order.

    Attributes:
        firstname: Customer first name.
        lastname: Customer last name.
        street: Street and house number.
        city: City name.
        postal_code: Postal code.
        telephone: Phone number the driver can call.
        email: Optional email address.
    """

    firstname: str
    lastname: str
    street: str
    city: str
    postal_code: str
    telephone: str
    email: Optional[str] = None


@dataclass(frozen=True)
class Pizza:
    """Pizza as provided by the catalog service.

    Only ``id`` is required: line items reference a pizza by id until the
    service resolves the rest from the catalog.
    """

    id: int
    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    price_cents: Optional[int] = None
    currency: str = DEFAULT_CURRENCY


@dataclass
class LineItem:
    """A single line of an order.

    Attributes:
        amount: How many pizzas of this kind were ordered.
        pizza: The ordered pizza.
        price_cents: Unit price in integer cents.
        currency: ISO currency code of ``price_cents``.
    """

    amount: int
    pizza: Pizza
    price_cents: int = 0
    currency: str = DEFAULT_CURRENCY

    @property
    def total_cents(self) -> int:
        return self.price_cents * self.amount


@dataclass
class Order:
    """The order aggregate: line items plus delivery address.

    Attributes:
        id: Persistent identifier, or None if not yet saved.
        items: Ordered list of LineItem objects.
        delivery_address: Where the pizzas go.
        comment: Free text comment for the delivery.
        status: Current OrderStatus.
        ordered_at: Creation timestamp (UTC).
        estimated_time_of_delivery: When the order should arrive.
    """

    id: uuid.UUID | None
    items: List[LineItem] = field(default_factory=list)
    delivery_address: Optional[Address] = None
    comment: Optional[str] = None
    status: OrderStatus = OrderStatus.NEW
    ordered_at: Optional[datetime] = None
    estimated_time_of_delivery: Optional[datetime] = None

    def add_item(self, item: LineItem) -> None:
        self.items.append(item)

    @property
    def total_cents(self) -> int:
        return sum(it.total_cents for it in self.items)

    @property
    def currency(self) -> str:
        return self.items[0].currency if self.items else DEFAULT_CURRENCY


@dataclass(frozen=True)
class OrderPage:
    """One zero-based page of orders."""

    items: List[Order]
    number: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total_elements + self.size - 1) // self.size


# ---- Ports (DIP) ----
class CatalogPort(Protocol):
    """Port describing the pizza catalog lookups used by the domain."""

    def get_pizza(self, pizza_id: int) -> Optional[Pizza]:
        """Return the pizza with the given id, or None when it is unknown.

        Raises:
            NotImplementedError: If the method is not implemented by the
                concrete class.
        """
        raise NotImplementedError()


class OrderRepositoryPort(Protocol):
    """Port describing order persistence."""

    def create(self, order: Order) -> Order:
        raise NotImplementedError()

    def get(self, order_id) -> Optional[Order]:
        raise NotImplementedError()

    def list(self, page: int, size: int) -> OrderPage:
        raise NotImplementedError()

    def delete_all(self) -> int:
        raise NotImplementedError()


class OrderEventPublisher(Protocol):
    """Port notifying external listeners about order lifecycle events."""

    def send_order_created_event(self, order: Order) -> None:
        """Announce a newly created order.

        Args:
            order: The persisted order, id already assigned.
        """
        raise NotImplementedError()


# ---- Domain service ----
class OrderService:
    """Domain service responsible for creating and reading orders.

    Creation resolves every ordered pizza through the catalog port, prices
    the line items with the catalog price, stamps timestamps, persists the
    aggregate and publishes one order-created event.
    """

    def __init__(
        self,
        catalog: CatalogPort,
        repository: OrderRepositoryPort,
        publisher: OrderEventPublisher,
        delivery_estimate_minutes: int = 45,
    ):
        """Initialize the service with required dependencies.

        Args:
            catalog: CatalogPort used to resolve pizzas.
            repository: Persistence for the order aggregate.
            publisher: Receives the order-created event.
            delivery_estimate_minutes: Offset from ``ordered_at`` used for
                ``estimated_time_of_delivery``.
        """
        self.catalog = catalog
        self.repository = repository
        self.publisher = publisher
        self.delivery_estimate_minutes = delivery_estimate_minutes

    def create(self, order: Order) -> Order:
        """Create an order: validate, resolve pizzas, persist, publish.

        Args:
            order: Unsaved Order; line items need only carry a pizza id.

        Returns:
            The persisted Order with id, status and timestamps set.

        Raises:
            ValueError: With one of the following codes:
                'EMPTY_ORDER' if the order has no items.
                'MISSING_ADDRESS' if there is no delivery address.
                'UNKNOWN_PIZZA' if the catalog does not know a pizza.
                'MIXED_CURRENCIES' if the catalog prices differ in currency.
            RuntimeError: 'CATALOG_PRICE_MISSING' if a resolved pizza has no price.
        """
        if not order.items:
            raise ValueError("EMPTY_ORDER")
        if order.delivery_address is None:
            raise ValueError("MISSING_ADDRESS")

        # 1) Resolve pizzas; the catalog price wins over anything supplied
        for item in order.items:
            pizza = self.catalog.get_pizza(item.pizza.id)
            if pizza is None:
                raise ValueError("UNKNOWN_PIZZA")
            item.pizza = pizza
            if pizza.price_cents is None or not pizza.currency:
                raise RuntimeError("CATALOG_PRICE_MISSING")
            item.price_cents = pizza.price_cents
            item.currency = pizza.currency
        if len({it.currency for it in order.items}) > 1:
            raise ValueError("MIXED_CURRENCIES")

        # 2) Stamp
        now = datetime.now(timezone.utc)
        order.status = OrderStatus.NEW
        order.ordered_at = now
        order.estimated_time_of_delivery = now + timedelta(minutes=self.delivery_estimate_minutes)

        # 3) Persist + announce
        saved = self.repository.create(order)
        logger.info(
            "order created",
            extra={"order_id": str(saved.id), "items": len(saved.items), "total_cents": saved.total_cents},
        )
        self.publisher.send_order_created_event(saved)
        return saved

    def get(self, order_id) -> Order:
        """Return a stored order.

        Raises:
            ValueError: 'NOT_FOUND' if no order has this id.
        """
        order = self.repository.get(order_id)
        if order is None:
            raise ValueError("NOT_FOUND")
        return order

    def get_all(self, page: int = 0, size: int = 20) -> OrderPage:
        """Return a zero-based page of orders, newest first."""
        return self.repository.list(page, size)
