import os


def _as_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw is not None else int(default)
    except (TypeError, ValueError):
        return int(default)


# Run with: gunicorn "stateflare:create_app()"
# Workers share nothing; all counter state lives in the database.
wsgi_app = os.getenv("GUNICORN_WSGI_APP", "stateflare:create_app()")
bind = os.getenv("GUNICORN_BIND", f"0.0.0.0:{_as_int('PORT', 8000)}")
workers = max(1, _as_int("GUNICORN_WORKERS", _as_int("WEB_CONCURRENCY", 2)))
threads = max(1, _as_int("GUNICORN_THREADS", 4))
worker_class = os.getenv("GUNICORN_WORKER_CLASS", "gthread")

timeout = _as_int("GUNICORN_TIMEOUT", 30)
graceful_timeout = _as_int("GUNICORN_GRACEFUL_TIMEOUT", 30)
keepalive = _as_int("GUNICORN_KEEPALIVE", 5)

max_requests = _as_int("GUNICORN_MAX_REQUESTS", 1000)
max_requests_jitter = _as_int("GUNICORN_MAX_REQUESTS_JITTER", 50)

preload_app = os.getenv("GUNICORN_PRELOAD", "false").lower() == "true"

# Stream logs to platform collector.
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
