"""
Gunicorn configuration for the Postora API.

Reads LOG_LEVEL and SQLITE_BUSY_TIMEOUT from the app's own settings
(app/core/config.py). Server-only env vars:
  PORT     - TCP port to bind (default: 8000)
  WORKERS  - number of worker processes (default: 2)
"""
import os

from app.core.config import settings

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

workers = int(os.environ.get("WORKERS", "2"))
worker_class = "uvicorn.workers.UvicornWorker"

# Import the app once in the master; workers inherit it after fork.
preload_app = True

keepalive = 5

# A post request may wait SQLITE_BUSY_TIMEOUT for another worker's write lock.
timeout = max(120, int(settings.SQLITE_BUSY_TIMEOUT) * 2)
graceful_timeout = 30

loglevel = settings.LOG_LEVEL.lower()
accesslog = "-"
errorlog = "-"


def post_fork(server, worker):
    # Connections pooled in the master belong to the master.
    from app.db.base import engine

    engine.dispose(close=False)
    server.log.info("Worker %s: database pool reset after fork", worker.pid)
