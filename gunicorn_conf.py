"""
Gunicorn configuration for the account API.

    gunicorn src.main:app -c gunicorn_conf.py

Only the producing side runs here. The notification consumer is a set of
Celery workers, one per partition queue (see src/infrastructure/tasks/celery_config.py).

Decision: Every Uvicorn worker process builds its own Celery publisher and
database pool through the lru_cached dependencies, so nothing is shared
across forks.
"""

import multiprocessing
import os

from config.settings import settings

bind = f"{settings.api_host}:{settings.api_port}"

# (2 x CPU cores) + 1; registration and login are I/O-bound
workers = int(os.getenv("GUNICORN_WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 1000
max_requests_jitter = 50

# Registration blocks on the broker for at most publish_timeout_seconds per attempt
timeout = max(30, int(settings.publish_timeout_seconds * 4))
graceful_timeout = 30
keepalive = 5

accesslog = "-"
errorlog = "-"
loglevel = settings.log_level.lower()

proc_name = settings.app_name
