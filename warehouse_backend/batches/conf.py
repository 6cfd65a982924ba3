"""
PATH: batches/conf.py

Inventory engine tunables.

Values come from settings.INVENTORY (env-backed in backend/settings/base.py).
Missing keys fall back to DEFAULTS so the engine works with bare settings.
"""

from django.conf import settings

DEFAULTS = {
    "NEAR_EXPIRY_DAYS": 30,
    "EXPIRY_CRITICAL_DAYS": 7,
    "EXPIRY_HIGH_DAYS": 14,
    "EXPIRY_SCAN_DEFAULT_DAYS": 30,
    "EXPIRY_SCAN_MAX_DAYS": 365,
    "BATCH_NUMBER_MAX_RETRIES": 3,
}


def inventory_setting(name: str) -> int:
    if name not in DEFAULTS:
        raise KeyError(f"Unknown inventory setting: {name}")

    configured = getattr(settings, "INVENTORY", None) or {}
    value = configured.get(name, DEFAULTS[name])
    return int(value)
