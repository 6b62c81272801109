"""App settings with defaults, overridable through ``settings.STAFFING``."""

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "DEFAULT_MAP_IMAGE": "/static/staffing/map-background.png",
    "MAX_AVATAR_BYTES": 1 * 1024 * 1024,
    "MAX_MAP_IMAGE_BYTES": 2 * 1024 * 1024,
    "DRAG_THRESHOLD_PX": 5,
    "PUBLIC_SESSION_CACHE_TTL": 60,
}


def get_setting(name: str) -> Any:
    overrides = getattr(settings, "STAFFING", {})
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
