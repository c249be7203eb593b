"""Package-level default configuration values."""

from __future__ import annotations

# Default cache settings
DEFAULT_CACHE_DIR = "./cache"
DEFAULT_CACHE_ENABLED = True

# Upstream transformation service
DEFAULT_IMGPROXY_URL = "http://localhost:8888"
DEFAULT_TRANSFORM_TIMEOUT = 30.0

# Statistics scan concurrency
DEFAULT_SCAN_WORKERS = 16
