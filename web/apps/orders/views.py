"""HTTP views for the orders app.

This module contains the DRF API views of the order service. Views are
kept intentionally small: they validate requests (via Pydantic), map to
domain objects, delegate to the domain service, and return HAL responses.

The views obtain a configured ``OrderService`` from ``get_order_service()``
which returns HTTP adapter-backed ports (``HttpCatalogClient``,
``HttpOrderEventPublisher``) or in-process stubs (``CatalogStub``,
``LoggingOrderEventPublisher``) depending on runtime settings. This allows
tests and local development to swap implementations without changing view
logic.

Idempotency: when an ``Idempotency-Key`` header is provided, the create
endpoint stores the first answer and replays it (same status and body,
``Idempotent-Replay: true``) for retries with the same payload. Reusing the
key with a different payload returns HTTP 409. A create that fails upstream
releases its key, so the client can retry it.
"""
import json
import logging

import httpx
from django.conf import settings
from django.db import transaction
from pydantic import ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from . import providers
from .domain import Address, LineItem, Order, Pizza
from .hal import order_representation, order_uri, page_representation
from .idempotency import finalize, get_or_create_idempotent, release
from .schemas import CreateOrderDTO

logger = logging.getLogger("orders.api")

# Domain error code -> HTTP status
ERROR_STATUS = {
    "EMPTY_ORDER": status.HTTP_400_BAD_REQUEST,
    "MISSING_ADDRESS": status.HTTP_400_BAD_REQUEST,
    "UNKNOWN_PIZZA": 422,
    "MIXED_CURRENCIES": 422,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
}


def _to_order(dto: CreateOrderDTO) -> Order:
    a = dto.delivery_address
    order = Order(
        id=None,
        comment=dto.comment,
        delivery_address=Address(
            firstname=a.firstname,
            lastname=a.lastname,
            street=a.street,
            city=a.city,
            postal_code=a.postal_code,
            telephone=a.telephone,
            email=a.email,
        ),
    )
    for it in dto.order_items:
        order.add_item(LineItem(amount=it.amount, pizza=Pizza(id=it.pizza)))
    return order


def _failed(rec, status_code: int, body: dict) -> Response:
    """Answer a failed create and settle its idempotency record, if any.

    Client errors are stored for replay. Upstream failures release the key
    so a retry is processed again.
    """
    if rec:
        if status_code >= 500:
            release(rec)
        else:
            finalize(rec, status_code, body)
    return Response(body, status=status_code)


def _query_int(request, name: str, default: int) -> int:
    raw = request.query_params.get(name)
    if raw is None or raw == "":
        return default
    value = int(raw)  # ValueError handled by caller
    if value < 0:
        raise ValueError(name)
    return value


class OrdersCollectionView(APIView):
    """The orders collection: list orders (GET) and create one (POST).

    Creation validates the payload with a Pydantic DTO, lets the domain
    service resolve the pizzas against the catalog, persist the order and
    publish the order-created event, then answers 201 with a ``Location``
    header pointing at the new order.
    """
    throttle_classes = [ScopedRateThrottle]

    def get_throttles(self):
        # DRF evaluates throttles in initial(), before get/post
        self.throttle_scope = "orders_list" if self.request.method == "GET" else "orders_create"
        return [throttle() for throttle in self.throttle_classes]

    def get(self, request):
        """Return a zero-based HAL page of orders, newest first.

        Query params: ``page`` (default 0) and ``size`` (default
        ``ORDERS_PAGE_SIZE``, capped at ``ORDERS_MAX_PAGE_SIZE``).
        """
        try:
            page = _query_int(request, "page", 0)
            size = _query_int(request, "size", getattr(settings, "ORDERS_PAGE_SIZE", 20))
        except ValueError:
            return Response({"detail": "INVALID_PAGE"}, status=status.HTTP_400_BAD_REQUEST)
        size = max(1, min(size, getattr(settings, "ORDERS_MAX_PAGE_SIZE", 100)))

        result = providers.get_order_service().get_all(page=page, size=size)
        return Response(page_representation(request, result), status=status.HTTP_200_OK)

    def post(self, request):
        """Create a new order.

        Args:
            request (Request): DRF request with JSON body and optional
                ``Idempotency-Key`` header.

        Returns:
            Response: One of the following responses.
            - 201 with the order and a ``Location`` header.
            - the stored status and body when an idempotent request is
              replayed (``Idempotent-Replay: true``).
            - 409 with {detail: "IDEMPOTENCY_CONFLICT"} when the key is
              reused with a different payload.
            - 400 for DTO validation errors, EMPTY_ORDER and MISSING_ADDRESS.
            - 422 with {detail: "UNKNOWN_PIZZA"} or {detail: "MIXED_CURRENCIES"}.
            - 503 with {detail: "UPSTREAM_UNAVAILABLE"} when the catalog or
              the event webhook cannot be reached.
        """
        idem_key = request.headers.get("Idempotency-Key")

        # 1) Pydantic validation
        try:
            dto = CreateOrderDTO.model_validate(request.data)
        except ValidationError as e:
            body = {"detail": "VALIDATION_ERROR", "errors": json.loads(e.json(include_url=False))}
            return Response(body, status=status.HTTP_400_BAD_REQUEST)

        # 2) Idempotency get-or-create
        rec = None
        if idem_key:
            try:
                existing, rec = get_or_create_idempotent(idem_key, request.data)
            except ValueError:
                return Response({"detail": "IDEMPOTENCY_CONFLICT"}, status=status.HTTP_409_CONFLICT)
            if existing:
                if not rec.response_status:
                    return Response({"detail": "IDEMPOTENCY_IN_PROGRESS"}, status=status.HTTP_409_CONFLICT)
                resp = Response(rec.response_body, status=rec.response_status)
                if rec.order_id is not None:
                    resp["Location"] = order_uri(request, rec.order_id)
                resp["Idempotent-Replay"] = "true"
                return resp

        # 3) Domain: resolve, persist and publish in one transaction
        service = providers.get_order_service()
        try:
            with transaction.atomic():
                out = service.create(_to_order(dto))
        except ValueError as e:
            code = str(e)
            if code in ERROR_STATUS:
                return _failed(rec, ERROR_STATUS[code], {"detail": code})
            logger.exception("unexpected error while creating order")
            return _failed(rec, status.HTTP_503_SERVICE_UNAVAILABLE, {"detail": "UPSTREAM_UNAVAILABLE"})
        except (httpx.HTTPError, RuntimeError):
            logger.exception("upstream call failed while creating order")
            return _failed(rec, status.HTTP_503_SERVICE_UNAVAILABLE, {"detail": "UPSTREAM_UNAVAILABLE"})
        except Exception:
            # the key must never stay in progress
            logger.exception("unexpected error while creating order")
            return _failed(rec, status.HTTP_503_SERVICE_UNAVAILABLE, {"detail": "UPSTREAM_UNAVAILABLE"})

        # 4) Response
        body = order_representation(request, out)
        if rec:
            finalize(rec, status.HTTP_201_CREATED, body, order_id=out.id)

        return Response(body, status=status.HTTP_201_CREATED, headers={"Location": order_uri(request, out.id)})


class RetrieveOrderView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "orders_detail"

    def get(self, request, oid):
        try:
            order = providers.get_order_service().get(oid)
        except ValueError as e:
            code = str(e)
            return Response({"detail": code}, status=ERROR_STATUS.get(code, status.HTTP_400_BAD_REQUEST))

        return Response(order_representation(request, order), status=status.HTTP_200_OK)
