from __future__ import annotations

import os

# gunicorn -c gunicorn_conf.py leaveflow.main:app

bind = os.getenv("BIND", "0.0.0.0:8000")
worker_class = "uvicorn.workers.UvicornWorker"
# creation is serialized per employee in-process; keep one worker on SQLite
workers = int(os.getenv("WEB_CONCURRENCY", "1"))
threads = 4
timeout = 60

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
capture_output = True

enable_stdio_inheritance = True
