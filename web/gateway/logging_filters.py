"""Logging filters for the JSON log handlers configured in ``config.settings``."""

import os
from logging import Filter, LogRecord

from .middleware import REQUEST_ID_CTX


class RequestIdFilter(Filter):
    """Attach the current request id to each record as ``request_id``.

    Outside of a request the ContextVar default ("-") is used, so
    formatters can always reference ``%(request_id)s``.
    """

    def filter(self, record: LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = REQUEST_ID_CTX.get()
        return True


class ServiceNameFilter(Filter):
    """Stamp records with the service name (``SERVICE_NAME`` env var)."""

    def __init__(self, name: str = ""):
        super().__init__(name)
        self.service = os.getenv("SERVICE_NAME", "order-service")

    def filter(self, record: LogRecord) -> bool:
        record.service = self.service
        return True
