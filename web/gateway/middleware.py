"""Gateway middleware: request ids, access logging and a payload size guard.

``RequestIdMiddleware`` gives every request an identifier, read from the
incoming ``X-Request-Id`` header or generated as a UUID4. The id is stored
on the request and in ``REQUEST_ID_CTX`` so log filters and the outbound
HTTP adapters can pick it up without passing it around; it is echoed in the
``X-Request-ID`` response header. When the response goes out one access
log line is written with method, path, status and duration.

``ApiSizeLimitMiddleware`` rejects API requests whose declared body is
larger than ``settings.API_MAX_BYTES`` with HTTP 413.
"""

import contextvars
import logging
import time
import uuid

from django.conf import settings
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

REQUEST_ID_CTX = contextvars.ContextVar("request_id", default="-")

access_logger = logging.getLogger("gateway.access")


class RequestIdMiddleware(MiddlewareMixin):
    """Sets, propagates and returns a per-request identifier.

    Attributes:
        HEADER (str): Incoming header as found in ``request.META``.
        RESPONSE_HEADER (str): Header added to outgoing responses.
    """

    HEADER = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-ID"

    def process_request(self, request):
        rid = request.META.get(self.HEADER) or str(uuid.uuid4())
        request.request_id = rid
        request._started_at = time.monotonic()
        REQUEST_ID_CTX.set(rid)

    def process_response(self, request, response):
        """Add the ``X-Request-ID`` header and log the request.

        Falls back to the ContextVar value when the request never went
        through ``process_request`` (e.g. an earlier middleware answered).
        """
        rid = getattr(request, "request_id", REQUEST_ID_CTX.get())
        response[self.RESPONSE_HEADER] = rid
        started = getattr(request, "_started_at", None)
        access_logger.info(
            "request handled",
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": round((time.monotonic() - started) * 1000, 2) if started else None,
            },
        )
        return response


class ApiSizeLimitMiddleware(MiddlewareMixin):
    """Answers 413 for API requests above ``API_MAX_BYTES``."""

    def process_request(self, request):
        prefix = getattr(settings, "API_PREFIX", "/api/")
        if not request.path.startswith(prefix):
            return None
        limit = getattr(settings, "API_MAX_BYTES", 1024 * 1024)
        clen = request.META.get("CONTENT_LENGTH")
        if clen and clen.isdigit() and int(clen) > limit:
            return JsonResponse({"detail": "PAYLOAD_TOO_LARGE"}, status=413)
        return None
