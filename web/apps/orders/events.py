"""Order lifecycle events.

Events describe facts that already happened, so they are named in the past
tense and treated as immutable once built.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from .domain import Order, format_money


class OrderCreatedLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    pizza_id: int
    amount: int
    price: str


class OrderCreatedEvent(BaseModel):
    """An order was accepted and stored."""

    model_config = ConfigDict(frozen=True)

    event_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    event_type: str = "OrderCreated"
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    order_id: uuid.UUID
    status: str
    ordered_at: datetime
    total_price: str
    delivery_city: str
    items: list[OrderCreatedLine]

    @classmethod
    def from_order(cls, order: Order) -> "OrderCreatedEvent":
        return cls(
            order_id=order.id,
            status=order.status.value,
            ordered_at=order.ordered_at,
            total_price=format_money(order.total_cents, order.currency),
            delivery_city=order.delivery_address.city,
            items=[
                OrderCreatedLine(
                    pizza_id=it.pizza.id,
                    amount=it.amount,
                    price=format_money(it.price_cents, it.currency),
                )
                for it in order.items
            ],
        )
