"""Startup-time helpers for safe config logging."""

from urllib.parse import urlsplit, urlunsplit

from apiprobe.common.config import settings
from apiprobe.common.logging import logger


SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN")


def _safe_value(name: str, value: object) -> str:
    """Render one setting, redacting secret-like names and URL userinfo."""

    if any(marker in name.upper() for marker in SECRET_MARKERS):
        return "<redacted>"
    text = str(value)
    if isinstance(value, str) and "@" in text and "://" in text:
        parts = urlsplit(text)
        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        return urlunsplit((parts.scheme, host, parts.path, parts.query, parts.fragment))
    return text


def log_startup_config(service_name: str, keys: list[str]) -> None:
    """Log selected settings fields for quick troubleshooting."""

    values = settings.model_dump()
    config = {"service": service_name}
    for key in keys:
        config[key] = _safe_value(key, values[key]) if key in values else "<unset>"
    logger.info("startup_config=%s", config)
