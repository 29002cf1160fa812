from __future__ import annotations

import os
from typing import Any

LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


def env_int(name: str, default: int, *, minimum: int | None = None, maximum: int | None = None) -> int:
    """Read an integer setting, falling back to ``default`` and clamping to bounds."""
    try:
        value = int(os.environ[name].strip())
    except (KeyError, ValueError):
        value = default
    if minimum is not None:
        value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def log_level(prefix: str) -> str:
    level = os.environ.get(f"{prefix}_LOG_LEVEL", "info").strip().lower()
    return level if level in LOG_LEVELS else "info"


def server_settings(prefix: str, default_port: int) -> dict[str, Any]:
    # workers share one database file
    return {
        "host": os.environ.get(f"{prefix}_HOST", "127.0.0.1").strip() or "127.0.0.1",
        "port": env_int(f"{prefix}_PORT", default_port, minimum=1, maximum=65535),
        "workers": env_int(f"{prefix}_WORKERS", 1, minimum=1, maximum=max(1, (os.cpu_count() or 1) * 2)),
        "log_level": log_level(prefix),
        "proxy_headers": True,
        "server_header": False,
    }
