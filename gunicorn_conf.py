import os

# gunicorn -c gunicorn_conf.py
wsgi_app = "elasticizer.main:app"
worker_class = "uvicorn.workers.UvicornWorker"

bind = f"0.0.0.0:{os.getenv('PORT', '8000')}"

# Each worker runs its own event loop and its own Elasticsearch connection pool
workers = int(os.getenv("WEB_CONCURRENCY", "1"))

# Trust the proxy in front of us for client IPs
forwarded_allow_ips = "*"

# Timeouts / keepalive
timeout = int(os.getenv("TIMEOUT", "60"))
graceful_timeout = int(os.getenv("GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("KEEPALIVE", "75"))

# Logging to stdout/stderr
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOGLEVEL", "info")
