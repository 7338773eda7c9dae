"""
Gunicorn configuration for the Bet On Yourself API.

Env vars that override defaults:
  PORT     : TCP port to bind
  WORKERS  : number of worker processes (default: 2)
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# 2 workers is safe for a 512 MB container.
workers = int(os.environ.get("WORKERS", "2"))

# Each worker runs Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

proc_name = "betonyou-api"

keepalive = 5

# Kill a worker that hasn't responded in 120 s.
timeout = 120

# Access and error logs to stdout; application logs go through structlog.
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

# Wait up to 30 s for in-flight requests (a running cron sweep included).
graceful_timeout = 30
