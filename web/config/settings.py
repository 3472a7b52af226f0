"""Django settings for the order service.

Values come from environment variables so the same image runs locally, in
CI and behind gunicorn. PostgreSQL is used when ``DB_HOST`` is set, SQLite
otherwise.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent  # .../web


def env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-insecure-change-me")
DEBUG = env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = [h for h in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "orders",
]

MIDDLEWARE = [
    "gateway.middleware.RequestIdMiddleware",
    "gateway.middleware.ApiSizeLimitMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

if os.getenv("DB_HOST"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "HOST": os.getenv("DB_HOST"),
            "PORT": os.getenv("DB_PORT", "5432"),
            "NAME": os.getenv("DB_NAME", "orders"),
            "USER": os.getenv("DB_USER", "orders_user"),
            "PASSWORD": os.getenv("DB_PASSWORD", "orders-pass"),
            "CONN_MAX_AGE": int(os.getenv("DB_CONN_MAX_AGE", "60")),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.getenv("SQLITE_PATH", str(BASE_DIR / "db.sqlite3")),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
USE_TZ = True
TIME_ZONE = "UTC"

# ---- REST framework ----
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "orders.hal.HalJSONRenderer",
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_THROTTLE_RATES": {
        "orders_list": os.getenv("THROTTLE_ORDERS_LIST", "600/min"),
        "orders_create": os.getenv("THROTTLE_ORDERS_CREATE", "120/min"),
        "orders_detail": os.getenv("THROTTLE_ORDERS_DETAIL", "600/min"),
    },
}

# ---- Orders ----
USE_HTTP_ADAPTERS = env_bool("USE_HTTP_ADAPTERS", True)
CATALOG_BASE_URL = os.getenv("CATALOG_BASE_URL", "http://localhost:9001")
ORDER_EVENTS_URL = os.getenv("ORDER_EVENTS_URL", "")
ORDER_DELIVERY_ESTIMATE_MINUTES = int(os.getenv("ORDER_DELIVERY_ESTIMATE_MINUTES", "45"))
ORDERS_PAGE_SIZE = int(os.getenv("ORDERS_PAGE_SIZE", "20"))
ORDERS_MAX_PAGE_SIZE = int(os.getenv("ORDERS_MAX_PAGE_SIZE", "100"))

# ---- Outbound HTTP ----
HTTP_TIMEOUT_SECS = float(os.getenv("HTTP_TIMEOUT_SECS", "2.0"))
HTTP_RETRY_MAX = int(os.getenv("HTTP_RETRY_MAX", "3"))
HTTP_RETRY_BACKOFF_BASE = float(os.getenv("HTTP_RETRY_BACKOFF_BASE", "0.15"))
HTTP_RETRY_MAX_SLEEP = float(os.getenv("HTTP_RETRY_MAX_SLEEP", "0.5"))
HTTP_CIRCUIT_FAIL_THRESHOLD = int(os.getenv("HTTP_CIRCUIT_FAIL_THRESHOLD", "5"))
HTTP_CIRCUIT_RESET_TIMEOUT = float(os.getenv("HTTP_CIRCUIT_RESET_TIMEOUT", "30"))

# ---- Gateway ----
API_PREFIX = "/api/"
API_MAX_BYTES = int(os.getenv("API_MAX_BYTES", str(1 * 1024 * 1024)))

# ---- Logging ----
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": "gateway.logging_filters.RequestIdFilter"},
        "service": {"()": "gateway.logging_filters.ServiceNameFilter"},
    },
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s %(service)s",
            "rename_fields": {"asctime": "timestamp", "levelname": "level"},
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "filters": ["request_id", "service"],
        },
    },
    "loggers": {
        "orders": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "gateway": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "django.request": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}
