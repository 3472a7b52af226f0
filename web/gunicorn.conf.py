import os, multiprocessing

def cpu():
    return max(1, (os.cpu_count() or multiprocessing.cpu_count()))

wsgi_app = "config.wsgi:application"
bind = os.getenv("GUNI_BIND", "0.0.0.0:8000")

# Worker processes
workers = int(os.getenv("GUNI_WORKERS", str(min(max(2, cpu() * 2), 8))))

# Threads per worker; the catalog lookups are blocking IO
worker_class = "gthread"
threads = int(os.getenv("GTHREADS", "4"))

# Timeouts
timeout = int(os.getenv("GUNI_TIMEOUT", "60"))
graceful_timeout = int(os.getenv("GUNI_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("GUNI_KEEPALIVE", "5"))

# Recycle workers
preload_app = True
max_requests = int(os.getenv("GUNI_MAX_REQUESTS", "2000"))
max_requests_jitter = int(os.getenv("GUNI_MAX_REQUESTS_JITTER", "200"))

# Access log goes through gateway.access as JSON, keep gunicorn's own quiet
accesslog = None
errorlog = "-"
loglevel = os.getenv("GUNI_LOGLEVEL", "info")
