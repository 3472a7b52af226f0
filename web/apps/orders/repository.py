"""Repository layer for persisting orders.

This module contains a small repository abstraction used by the
application to persist the order aggregate. It keeps a thin interface so
the domain layer is not coupled to Django ORM details: callers hand in and
get back domain ``Order`` objects, never model instances.
"""

from django.core.paginator import EmptyPage, Paginator
from django.db import transaction

from .models import OrderModel, LineItemModel
from .domain import Address, LineItem, Order, OrderPage, OrderStatus, Pizza


def to_domain(obj: OrderModel) -> Order:
    """Map an ``OrderModel`` (with its line items) to a domain ``Order``."""
    address = Address(
        firstname=obj.firstname,
        lastname=obj.lastname,
        street=obj.street,
        city=obj.city,
        postal_code=obj.postal_code,
        telephone=obj.telephone,
        email=obj.email or None,
    )
    items = [
        LineItem(
            amount=li.amount,
            pizza=Pizza(id=li.pizza_id, price_cents=li.price_cents, currency=li.currency),
            price_cents=li.price_cents,
            currency=li.currency,
        )
        for li in obj.line_items.all()
    ]
    return Order(
        id=obj.id,
        items=items,
        delivery_address=address,
        comment=obj.comment or None,
        status=OrderStatus(obj.status),
        ordered_at=obj.ordered_at,
        estimated_time_of_delivery=obj.estimated_time_of_delivery,
    )


class OrderRepository:
    """Repository that persists Order aggregates using Django ORM.

    The address is embedded in the ``orders`` row; line items live in
    ``order_line_items`` and keep their position within the order.
    """

    def create(self, order: Order) -> Order:
        """Persist a new order together with its line items.

        Args:
            order: Domain ``Order`` to persist. Must carry a delivery
                address and ``ordered_at``.

        Returns:
            A fresh domain ``Order`` read back from the stored rows, with
            its UUID ``id`` assigned.
        """
        addr = order.delivery_address
        with transaction.atomic():
            obj = OrderModel.objects.create(
                status=order.status.value if isinstance(order.status, OrderStatus) else order.status,
                comment=order.comment or "",
                ordered_at=order.ordered_at,
                estimated_time_of_delivery=order.estimated_time_of_delivery,
                total_cents=order.total_cents,
                currency=order.currency,
                firstname=addr.firstname,
                lastname=addr.lastname,
                street=addr.street,
                city=addr.city,
                postal_code=addr.postal_code,
                telephone=addr.telephone,
                email=addr.email or "",
            )
            LineItemModel.objects.bulk_create(
                [
                    LineItemModel(
                        order=obj,
                        position=pos,
                        amount=it.amount,
                        pizza_id=it.pizza.id,
                        price_cents=it.price_cents,
                        currency=it.currency,
                    )
                    for pos, it in enumerate(order.items)
                ]
            )
        return self.get(obj.id)

    def get(self, order_id) -> Order | None:
        """Return the stored order or None when the id is unknown."""
        obj = OrderModel.objects.prefetch_related("line_items").filter(id=order_id).first()
        return to_domain(obj) if obj else None

    def list(self, page: int, size: int) -> OrderPage:
        """Return a zero-based page of orders, newest first.

        Pages past the end come back empty instead of raising.
        """
        qs = OrderModel.objects.prefetch_related("line_items").order_by("-internal_id")
        p = Paginator(qs, size)
        try:
            objs = list(p.page(page + 1).object_list)
        except EmptyPage:
            objs = []
        return OrderPage(
            items=[to_domain(o) for o in objs],
            number=page,
            size=size,
            total_elements=p.count,
        )

    def delete_all(self) -> int:
        """Delete every order (line items cascade). Returns the order count."""
        count = OrderModel.objects.count()
        OrderModel.objects.all().delete()
        return count
