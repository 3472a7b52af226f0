"""HTTP adapter clients with retries, circuit breakers, and context headers.

This module implements concrete HTTP clients for the domain ports using
``httpx``. It adds:

- Request correlation: propagates ``X-Request-ID`` from a ContextVar set by
    the gateway middleware.
- Circuit breaker per downstream service (catalog, order events) to avoid
    hammering unhealthy dependencies, with HALF_OPEN probing after a timeout.
- Simple retry policy with exponential backoff for transport errors and 5xx.
"""

import logging
import threading
import time
from typing import Callable, Optional

import httpx
from django.conf import settings

from gateway.middleware import REQUEST_ID_CTX

from .domain import CatalogPort, Order, OrderEventPublisher, Pizza, to_cents
from .events import OrderCreatedEvent

logger = logging.getLogger("orders.http")


# ---------------- Circuit Breaker ---------------- #

class CircuitBreaker:
    """Minimal circuit breaker with CLOSED/OPEN/HALF_OPEN states.

    Transitions:
    - CLOSED → OPEN when failures reach ``fail_threshold``.
    - OPEN → HALF_OPEN after ``reset_timeout`` seconds.
    - HALF_OPEN → CLOSED on a successful probe; stays HALF_OPEN while a
      single probe is in flight; transitions back to OPEN on failure.

    This implementation is thread-safe via an internal lock.
    """

    def __init__(self, name: str, fail_threshold: int, reset_timeout: float):
        self.name = name
        self.fail_threshold = fail_threshold
        self.reset_timeout = reset_timeout
        self._lock = threading.RLock()
        self._failures = 0
        self._state = "CLOSED"  # CLOSED | OPEN | HALF_OPEN
        self._opened_at = 0.0
        self._half_open_probe_in_flight = False

    @property
    def state(self) -> str:
        """Current breaker state with time-based transition handling."""
        with self._lock:
            if self._state == "OPEN" and (time.monotonic() - self._opened_at) >= self.reset_timeout:
                self._state = "HALF_OPEN"
                self._half_open_probe_in_flight = False
            return self._state

    def before_call(self) -> str:
        """Check and update state before a protected call.

        Returns:
            str: The state at call time.

        Raises:
            RuntimeError: If the circuit is OPEN or a HALF_OPEN probe is busy.
        """
        with self._lock:
            st = self.state
            if st == "OPEN":
                raise RuntimeError("CIRCUIT_OPEN")
            if st == "HALF_OPEN":
                if self._half_open_probe_in_flight:
                    raise RuntimeError("CIRCUIT_HALF_OPEN_BUSY")
                self._half_open_probe_in_flight = True
            return st

    def on_success(self):
        """Record a successful call and close/reset the breaker."""
        with self._lock:
            self._failures = 0
            self._state = "CLOSED"
            self._half_open_probe_in_flight = False

    def on_failure(self):
        """Record a failed call and open the breaker if threshold exceeded."""
        with self._lock:
            self._failures += 1
            if self._state == "HALF_OPEN" or (
                self._failures >= self.fail_threshold and self._state != "OPEN"
            ):
                self._state = "OPEN"
                self._opened_at = time.monotonic()
                self._half_open_probe_in_flight = False
                logger.warning("circuit opened", extra={"circuit": self.name, "failures": self._failures})

    def on_finish(self):
        """Release any HALF_OPEN probe flag after a call finishes."""
        with self._lock:
            if self._state == "HALF_OPEN":
                self._half_open_probe_in_flight = False


# Per-service instances
_catalog_cb = CircuitBreaker(
    "catalog",
    getattr(settings, "HTTP_CIRCUIT_FAIL_THRESHOLD", 5),
    getattr(settings, "HTTP_CIRCUIT_RESET_TIMEOUT", 30.0),
)
_events_cb = CircuitBreaker(
    "order-events",
    getattr(settings, "HTTP_CIRCUIT_FAIL_THRESHOLD", 5),
    getattr(settings, "HTTP_CIRCUIT_RESET_TIMEOUT", 30.0),
)


# ---------------- Helpers ---------------- #

def _request_headers(extra: Optional[dict] = None) -> dict:
    """Build base headers including X-Request-ID and any extras."""
    headers: dict[str, str] = {}
    rid = REQUEST_ID_CTX.get()
    if rid and rid != "-":
        headers["X-Request-ID"] = rid
    if extra:
        headers.update(extra)
    return headers


def _retry_policy():
    """Return retry configuration as (max_retries, backoff_base_seconds)."""
    return (
        getattr(settings, "HTTP_RETRY_MAX", 3),
        getattr(settings, "HTTP_RETRY_BACKOFF_BASE", 0.15),
    )


def _should_retry(resp: Optional[httpx.Response], exc: Optional[Exception]) -> bool:
    """Retry only on transport exceptions or HTTP 5xx."""
    if exc is not None:
        return True
    if resp is not None and 500 <= resp.status_code < 600:
        return True
    return False


def _call(
    cb: CircuitBreaker,
    timeout: float,
    send: Callable[[httpx.Client, dict], httpx.Response],
    handle: Callable[[httpx.Response], tuple[bool, object]],
):
    """Run ``send`` under the breaker with retries and return the handled result.

    ``handle`` maps a response to ``(done, value)``: ``done`` means the
    response is a final outcome (success or business answer) and ``value``
    is returned. Anything else is retried while the policy allows it.

    Raises:
        RuntimeError: If the circuit is open.
        httpx.RequestError: For network/transport errors after retries.
        httpx.HTTPStatusError: For non-retriable or exhausted non-2xx responses.
    """
    max_retries, backoff = _retry_policy()
    tries = 0

    # CIRCUIT: precheck
    state = cb.before_call()
    headers = _request_headers({"X-Circuit-State": state, "X-Retry-Count": "0"})

    try:
        with httpx.Client(timeout=timeout) as client:
            while True:
                resp = None
                exc = None
                try:
                    resp = send(client, headers)
                    done, value = handle(resp)
                    if done:
                        cb.on_success()
                        return value
                    # Other statuses → evaluate retry/raise
                    if not _should_retry(resp, None):
                        resp.raise_for_status()
                except httpx.RequestError as e:
                    exc = e

                tries += 1
                headers["X-Retry-Count"] = str(tries)

                if tries > max_retries:
                    cb.on_failure()
                    if exc:
                        raise exc
                    resp.raise_for_status()

                sleep_s = backoff * (2 ** (tries - 1))  # exponential backoff
                cap = getattr(settings, "HTTP_RETRY_MAX_SLEEP", 0.5)
                logger.info(
                    "retrying upstream call",
                    extra={"circuit": cb.name, "try": tries, "error": str(exc) if exc else resp.status_code},
                )
                time.sleep(min(sleep_s, cap))
    finally:
        cb.on_finish()


class UpstreamReplyError(RuntimeError):
    """A downstream service answered, but with a body we cannot use."""


def pizza_from_json(data, pizza_id: int) -> Pizza:
    """Build a ``Pizza`` from the catalog's JSON representation.

    Raises:
        UpstreamReplyError: If the body is not a pizza or carries no usable
            price. A pizza is never priced at zero by default.
    """
    if not isinstance(data, dict):
        raise UpstreamReplyError("catalog reply is not an object")
    price = data.get("price")
    if not isinstance(price, dict) or price.get("amount") is None or not price.get("currency"):
        raise UpstreamReplyError("catalog reply has no price")
    amount = price["amount"]
    if isinstance(amount, bool):
        raise UpstreamReplyError("catalog price is not a number")
    try:
        price_cents = to_cents(amount)
        pid = int(data.get("id", pizza_id))
    except (ArithmeticError, TypeError, ValueError) as e:
        raise UpstreamReplyError(f"malformed catalog reply: {e}") from e
    if price_cents < 0:
        raise UpstreamReplyError("catalog price is negative")
    return Pizza(
        id=pid,
        name=data.get("name"),
        description=data.get("description"),
        image_url=data.get("imageUrl"),
        price_cents=price_cents,
        currency=price["currency"],
    )


# ---------------- Catalog Adapter ---------------- #

class HttpCatalogClient(CatalogPort):
    """HTTP client for the catalog service with retry and circuit breaker."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or settings.CATALOG_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECS

    def get_pizza(self, pizza_id: int) -> Optional[Pizza]:
        """Fetch one pizza from ``GET {base_url}/catalog/{id}``.

        Business mappings:
        - 200 → the parsed ``Pizza``
        - 404 → None (unknown pizza), not counted as circuit failure

        Args:
            pizza_id: Catalog id of the pizza.

        Returns:
            Pizza | None: The pizza, or None when the catalog does not know it.

        Raises:
            RuntimeError: If the catalog circuit is open.
            httpx.RequestError: For network/transport errors after retries.
            httpx.HTTPStatusError: For non-retriable non-2xx responses.
            UpstreamReplyError: If a 200 reply is not a usable pizza.
        """
        url = f"{self.base_url}/catalog/{pizza_id}"

        def send(client: httpx.Client, headers: dict) -> httpx.Response:
            return client.get(url, headers=headers or None)

        def handle(resp) -> tuple[bool, object]:
            if resp.status_code == 200:
                try:
                    data = resp.json()
                except ValueError as e:
                    raise UpstreamReplyError("catalog reply is not JSON") from e
                return True, pizza_from_json(data, pizza_id)
            if resp.status_code == 404:
                return True, None
            return False, None

        return _call(_catalog_cb, self.timeout, send, handle)

    def ping(self) -> bool:
        """Return True when the catalog's health endpoint answers 200."""
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.get(f"{self.base_url}/health", headers=_request_headers() or None)
        except httpx.HTTPError:
            return False
        return resp.status_code == 200


# ---------------- Order events Adapter ---------------- #

class HttpOrderEventPublisher(OrderEventPublisher):
    """Posts order-created events to a webhook with retry and circuit breaker."""

    def __init__(self, url: str | None = None, timeout: float | None = None):
        self.url = url or settings.ORDER_EVENTS_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECS

    def send_order_created_event(self, order: Order) -> None:
        """POST the ``OrderCreatedEvent`` for ``order``.

        Any 2xx counts as delivered.

        Raises:
            RuntimeError: If the events circuit is open.
            httpx.RequestError: For network/transport errors after retries.
            httpx.HTTPStatusError: For non-2xx responses.
        """
        event = OrderCreatedEvent.from_order(order)
        payload = event.model_dump(mode="json")

        def send(client: httpx.Client, headers: dict) -> httpx.Response:
            return client.post(self.url, json=payload, headers=headers or None)

        def handle(resp) -> tuple[bool, object]:
            return 200 <= resp.status_code < 300, None

        _call(_events_cb, self.timeout, send, handle)
        logger.info("order created event published", extra={"order_id": str(order.id), "event_id": str(event.event_id)})
