# web/apps/orders/tests/test_resilience.py
import httpx
import pytest

from orders.http_adapters import CircuitBreaker, HttpCatalogClient, _catalog_cb


def test_catalog_retries_on_5xx(monkeypatch, settings, pizza_salami_json):
    # fast retries, at least one retry
    settings.HTTP_RETRY_MAX = 1
    settings.HTTP_RETRY_BACKOFF_BASE = 0.0

    calls = {"n": 0}

    def fake_get(self, url, headers=None, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            class R:
                status_code = 500
                # the adapter must not call raise_for_status on an intermediate try
                def raise_for_status(self): raise AssertionError("should retry")
            return R()
        class R2:
            status_code = 200
            def json(self): return pizza_salami_json
        return R2()

    monkeypatch.setattr(httpx.Client, "get", fake_get, raising=True)
    monkeypatch.setattr("time.sleep", lambda *a, **k: None, raising=True)

    pizza = HttpCatalogClient(base_url="http://x").get_pizza(1)
    assert pizza.name == "Pizza Salami"
    assert calls["n"] == 2


def test_catalog_no_retry_on_404(monkeypatch, settings):
    settings.HTTP_RETRY_MAX = 3

    calls = {"n": 0}

    def fake_get(self, url, headers=None, **kwargs):
        calls["n"] += 1
        class R:
            status_code = 404
        return R()

    monkeypatch.setattr(httpx.Client, "get", fake_get, raising=True)
    monkeypatch.setattr("time.sleep", lambda *a, **k: None, raising=True)

    assert HttpCatalogClient(base_url="http://x").get_pizza(7) is None
    assert calls["n"] == 1
    assert _catalog_cb.state == "CLOSED"


def test_catalog_circuit_opens_after_repeated_failures(monkeypatch, settings):
    settings.HTTP_RETRY_MAX = 0
    monkeypatch.setattr(_catalog_cb, "fail_threshold", 2)

    def fake_get(self, url, headers=None, **kwargs):
        raise httpx.ConnectError("down")

    monkeypatch.setattr(httpx.Client, "get", fake_get, raising=True)
    client = HttpCatalogClient(base_url="http://x")

    for _ in range(2):
        with pytest.raises(httpx.ConnectError):
            client.get_pizza(1)
    assert _catalog_cb.state == "OPEN"
    with pytest.raises(RuntimeError, match="CIRCUIT_OPEN"):
        client.get_pizza(1)


def test_circuit_half_open_probe(monkeypatch):
    clock = {"t": 100.0}
    monkeypatch.setattr("time.monotonic", lambda: clock["t"], raising=True)

    cb = CircuitBreaker("test", fail_threshold=1, reset_timeout=10.0)
    cb.before_call()
    cb.on_failure()
    assert cb.state == "OPEN"

    clock["t"] += 10.0
    assert cb.before_call() == "HALF_OPEN"
    with pytest.raises(RuntimeError, match="CIRCUIT_HALF_OPEN_BUSY"):
        cb.before_call()

    cb.on_failure()  # failed probe re-opens
    assert cb.state == "OPEN"

    clock["t"] += 10.0
    cb.before_call()
    cb.on_success()
    assert cb.state == "CLOSED"
