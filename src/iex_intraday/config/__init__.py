"""Runtime configuration for IEX Intraday."""

from .day_policy import recent_days
from .settings import DEFAULT_BASE_URL, MAX_BATCH_SYMBOLS, IEXSettings, get_settings

__all__ = [
    "DEFAULT_BASE_URL",
    "IEXSettings",
    "MAX_BATCH_SYMBOLS",
    "get_settings",
    "recent_days",
]
