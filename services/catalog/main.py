"""Catalog service API built with FastAPI.

This module exposes the pizza menu the order service resolves line items
against: a health probe, the full menu and single pizzas by id. Persistence
is delegated to the SQLAlchemy-backed repository in ``repo.CatalogRepo``.

Run with ``uvicorn main:app --port 9001`` from this directory.
"""

import logging
import os
import time
import uuid
from typing import List

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from pythonjsonlogger.json import JsonFormatter
from sqlalchemy import text

from repo import CatalogRepo, PizzaRow, engine, init_db

app = FastAPI(title="Catalog Service")

# logger JSON
logger = logging.getLogger("catalog")
if not logger.handlers:
    h = logging.StreamHandler()
    h.setFormatter(JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s"))
    logger.addHandler(h)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())


@app.on_event("startup")
def _startup_db():
    # short active wait until the DB accepts connections
    deadline = time.time() + float(os.getenv("DB_STARTUP_TIMEOUT", "30"))
    while True:
        try:
            with engine.connect() as conn:
                conn.execute(text("select 1"))
            break
        except Exception:
            if time.time() > deadline:
                raise
            time.sleep(1)
    init_db()


class Price(BaseModel):
    """Money as the order service expects it: ``{"amount": 8.90, "currency": "EUR"}``."""
    amount: float
    currency: str = Field(pattern=r"^[A-Z]{3}$")


class PizzaOut(BaseModel):
    """A pizza on the menu.

    Attributes:
        id: Catalog id.
        name: Display name.
        description: Short description.
        imageUrl: Picture of the pizza.
        price: Unit price.
    """
    id: int
    name: str
    description: str
    imageUrl: str
    price: Price

    @classmethod
    def from_row(cls, row: PizzaRow) -> "PizzaOut":
        return cls(
            id=row.id,
            name=row.name,
            description=row.description,
            imageUrl=row.image_url,
            price=Price(amount=row.price_cents / 100, currency=row.currency),
        )


@app.get("/health")
def health():
    """Liveness/health probe endpoint.

    Returns:
        dict: A small JSON payload indicating service health.
    """
    return {"ok": True}


@app.get("/catalog", response_model=List[PizzaOut])
def list_pizzas():
    """Return the whole menu ordered by id."""
    return [PizzaOut.from_row(r) for r in CatalogRepo().list()]


@app.get("/catalog/{pizza_id}", response_model=PizzaOut)
def get_pizza(pizza_id: int):
    """Return one pizza.

    Raises:
        HTTPException: 404 when the id is not on the menu.
    """
    row = CatalogRepo().get(pizza_id)
    if row is None:
        raise HTTPException(status_code=404, detail="PIZZA_NOT_FOUND")
    return PizzaOut.from_row(row)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = rid
    started = time.monotonic()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
    finally:
        logger.info(
            "request handled",
            extra={
                "request_id": rid,
                "path": request.url.path,
                "method": request.method,
                "status": status,
                "duration_ms": round((time.monotonic() - started) * 1000, 2),
            },
        )
    response.headers["X-Request-ID"] = rid
    return response
