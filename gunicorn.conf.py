"""Gunicorn config for the Shop Ledger API."""
import os

# Bind to the platform's PORT or default 8000
bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Uvicorn async workers; each one loads its own snapshot of every sheet at startup.
# A reload only refreshes the worker that received it. Tune via WEB_CONCURRENCY.
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.environ.get("WEB_CONCURRENCY", "1"))

# Startup fetches eight sheets at SHOPLEDGER_TIMEOUT seconds each, at most
timeout = 120

# Graceful timeout for shutdown
graceful_timeout = 30

# Keep-alive must exceed the proxy keep-alive (commonly 60s)
keepalive = 65

# Logging: prints from the loader and store land in the error log
accesslog = "-"
errorlog = "-"
loglevel = "info"
capture_output = True
