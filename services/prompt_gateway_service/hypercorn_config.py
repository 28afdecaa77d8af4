"""Hypercorn configuration for the Prompt Gateway Service."""

import os

_default_host = "0.0.0.0"
_default_port = 8080  # Default port for Prompt Gateway Service

host = os.getenv("PROMPT_GATEWAY_HOST", _default_host)
port = int(os.getenv("PROMPT_GATEWAY_PORT", _default_port))
bind = f"{host}:{port}"
workers = int(os.getenv("WEB_CONCURRENCY", 1))
worker_class = "asyncio"

loglevel = os.getenv("PROMPT_GATEWAY_LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"

# Longer than the upstream timeout so in-flight provider calls can finish
graceful_timeout = int(os.getenv("GRACEFUL_TIMEOUT", 35))
keepalive_timeout = int(os.getenv("KEEP_ALIVE_TIMEOUT", 5))
