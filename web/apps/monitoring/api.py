from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse

from orders.http_adapters import HttpCatalogClient


def health_view(_request):
    """Database check plus, with HTTP adapters on, a catalog reachability check."""
    db_ok = False
    try:
        with connection.cursor() as cur:
            cur.execute("SELECT 1;")
        db_ok = True
    except DatabaseError:
        db_ok = False

    components = {"db": {"ok": db_ok}}
    if getattr(settings, "USE_HTTP_ADAPTERS", True):
        components["catalog"] = {"ok": HttpCatalogClient(timeout=1.0).ping()}

    ok = all(c["ok"] for c in components.values())
    code = 200 if ok else 503
    return JsonResponse({"ok": ok, "components": components}, status=code)
