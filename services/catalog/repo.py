"""SQLAlchemy repository for the pizza catalog.

This module provides database persistence for the pizzas the order service
resolves line items against. The schema is a single ``pizza`` table; prices
are kept in integer cents plus an ISO currency code.

The connection comes from ``CATALOG_DATABASE_URL`` when set (tests use a
SQLite file), otherwise from the CATALOG_DB_* variables for PostgreSQL. They are
prefixed so a shared environment never points the catalog at the orders
database.
"""

import os
from contextlib import contextmanager
from sqlalchemy import create_engine, Integer, String, select
from sqlalchemy.orm import DeclarativeBase, mapped_column, Session

CATALOG_DB_HOST = os.getenv("CATALOG_DB_HOST", "catalog-db")
CATALOG_DB_PORT = os.getenv("CATALOG_DB_PORT", "5432")
CATALOG_DB_NAME = os.getenv("CATALOG_DB_NAME", "catalog")
CATALOG_DB_USER = os.getenv("CATALOG_DB_USER", "catalog_user")
CATALOG_DB_PASSWORD = os.getenv("CATALOG_DB_PASSWORD", "catalog-pass")

DATABASE_URL = os.getenv(
    "CATALOG_DATABASE_URL",
    f"postgresql+psycopg://{CATALOG_DB_USER}:{CATALOG_DB_PASSWORD}@{CATALOG_DB_HOST}:{CATALOG_DB_PORT}/{CATALOG_DB_NAME}",
)
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)

class Base(DeclarativeBase): pass

class PizzaRow(Base):
    """SQLAlchemy model for one pizza on the menu.

    Attributes:
        id: Catalog id, referenced by order line items.
        name: Display name.
        description: Short description.
        image_url: Picture of the pizza.
        price_cents: Price in minor units.
        currency: ISO currency code.
    """
    __tablename__ = "pizza"
    id = mapped_column(Integer, primary_key=True)
    name = mapped_column(String(100), nullable=False)
    description = mapped_column(String(500), nullable=False, default="")
    image_url = mapped_column(String(500), nullable=False, default="")
    price_cents = mapped_column(Integer, nullable=False)
    currency = mapped_column(String(3), nullable=False, default="EUR")


DEFAULT_MENU = [
    dict(id=1, name="Pizza Salami", description="The classic - Pizza Salami",
         image_url="http://www.sardegna-rustica.de/images/pizza.jpg", price_cents=890, currency="EUR"),
    dict(id=2, name="Pizza Margherita", description="Tomato, mozzarella, basil",
         image_url="http://localhost/images/margherita.jpg", price_cents=750, currency="EUR"),
    dict(id=3, name="Pizza Funghi", description="Mushrooms and mozzarella",
         image_url="http://localhost/images/funghi.jpg", price_cents=850, currency="EUR"),
]


@contextmanager
def get_session():
    """Context manager that yields a SQLAlchemy session.

    The session is automatically closed when exiting the context.
    """
    with Session(engine) as s:
        yield s


class CatalogRepo:
    """Read/write access to the pizza table."""

    def get(self, pizza_id: int) -> PizzaRow | None:
        """Return the pizza or None when the id is unknown."""
        with get_session() as s:
            obj = s.get(PizzaRow, pizza_id)
            if obj is not None:
                s.expunge(obj)
            return obj

    def list(self) -> list[PizzaRow]:
        """Return all pizzas ordered by id."""
        with get_session() as s:
            rows = list(s.scalars(select(PizzaRow).order_by(PizzaRow.id)))
            for r in rows:
                s.expunge(r)
            return rows

    def upsert(self, pizza: dict) -> None:
        """Create or replace a pizza from a dict of column values."""
        with get_session() as s:
            s.merge(PizzaRow(**pizza))
            s.commit()


def init_db(seed: bool = True) -> None:
    """Create the schema and, when the table is empty, seed ``DEFAULT_MENU``."""
    Base.metadata.create_all(engine)
    if not seed:
        return
    with get_session() as s:
        empty = s.execute(select(PizzaRow.id).limit(1)).first() is None
    if empty:
        repo = CatalogRepo()
        for pizza in DEFAULT_MENU:
            repo.upsert(pizza)
