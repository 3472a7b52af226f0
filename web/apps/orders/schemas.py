"""Pydantic schemas for orders.

This module exposes the request/validation schemas used by the orders API
and the read DTOs the views serialize. The API speaks camelCase; the
schemas accept and emit it through field aliases.
"""

import re
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_AMOUNT = 50


class AddressIn(BaseModel):
    """Delivery address as posted by the client."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    firstname: str = Field(min_length=1, max_length=100)
    lastname: str = Field(min_length=1, max_length=100)
    street: str = Field(min_length=1, max_length=200)
    city: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(alias="postalCode", min_length=1, max_length=20)
    telephone: str = Field(min_length=1, max_length=40)
    email: Optional[str] = Field(default=None, max_length=254)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        """Accept a missing email; otherwise require a plausible address.

        Raises:
            ValueError: When the value does not look like an email address.
        """
        if v is None or v == "":
            return None
        if not EMAIL_RE.match(v):
            raise ValueError("Invalid email address")
        return v


class LineItemIn(BaseModel):
    """Input schema for a single order line.

    Attributes:
        amount: How many pizzas, 1 to ``MAX_AMOUNT``.
        pizza: Catalog pizza id. Accepts an integer, a numeric string or a
            link whose last path segment is the id.
    """

    amount: int = Field(gt=0, le=MAX_AMOUNT)
    pizza: int = Field(gt=0)

    @field_validator("pizza", mode="before")
    @classmethod
    def pizza_reference(cls, v):
        """Reduce a pizza link or id to the numeric catalog id.

        Args:
            v: Raw value from the payload, e.g. ``1``, ``"1"`` or
                ``"http://localhost/catalog/1"``.

        Returns:
            The id as int.

        Raises:
            ValueError: When no numeric id can be extracted.
        """
        if isinstance(v, bool):
            raise ValueError("Invalid pizza reference")
        if isinstance(v, int):
            return v
        if isinstance(v, str):
            path = urlparse(v.strip()).path if "://" in v else v.strip()
            last = path.rstrip("/").rsplit("/", 1)[-1]
            if last.isdigit():
                return int(last)
        raise ValueError("Invalid pizza reference")


class CreateOrderDTO(BaseModel):
    """Schema for creating an order.

    Attributes:
        comment: Optional delivery comment.
        delivery_address: Where to deliver (``deliveryAddress``).
        order_items: At least one line (``orderItems``).
    """

    model_config = ConfigDict(populate_by_name=True)

    comment: Optional[str] = Field(default=None, max_length=500)
    delivery_address: AddressIn = Field(alias="deliveryAddress")
    order_items: list[LineItemIn] = Field(alias="orderItems", min_length=1)


# ---- Read side ----
class Link(BaseModel):
    href: str


class LineItemReadDTO(BaseModel):
    amount: int
    price: str
    links: dict[str, Link] = Field(serialization_alias="_links")


class AddressReadDTO(BaseModel):
    firstname: str
    lastname: str
    street: str
    city: str
    postal_code: str = Field(serialization_alias="postalCode")
    telephone: str
    email: Optional[str] = None


class OrderReadDTO(BaseModel):
    """Single order representation (HAL)."""

    status: str
    ordered_at: datetime = Field(serialization_alias="orderedAt")
    total_price: str = Field(serialization_alias="totalPrice")
    estimated_time_of_delivery: Optional[datetime] = Field(
        default=None, serialization_alias="estimatedTimeOfDelivery"
    )
    comment: Optional[str] = None
    order_items: list[LineItemReadDTO] = Field(serialization_alias="orderItems")
    delivery_address: AddressReadDTO = Field(serialization_alias="deliveryAddress")
    links: dict[str, Link] = Field(serialization_alias="_links")


class PageMetadata(BaseModel):
    size: int
    total_elements: int = Field(serialization_alias="totalElements")
    total_pages: int = Field(serialization_alias="totalPages")
    number: int
