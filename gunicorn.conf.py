"""Gunicorn config for the Trucking Analytics API."""
import os

wsgi_app = "trucking_analytics.main:app"

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Each uvicorn worker loads its own DataStore at startup; exports are small,
# so memory per worker stays low. Tune via WEB_CONCURRENCY.
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))

# Excel exports and reloads re-read every statement file
timeout = 60
graceful_timeout = 30

# Must exceed the proxy keep-alive (60s)
keepalive = 65

accesslog = "-"
errorlog = "-"
loglevel = "info"
