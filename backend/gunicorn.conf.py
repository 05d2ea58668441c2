# Bind & workers
bind = "0.0.0.0:8000"
workers = 2  # override with env GUNICORN_WORKERS
# Admission counters live per process; threads share one limiter map.
threads = 4
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker); the app emits its own JSON access log
accesslog = None
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# X-Forwarded-For is read by the admission limiter; only trust the proxy
forwarded_allow_ips = "127.0.0.1"
proxy_protocol = False
wsgi_app = "authapi:create_app()"
