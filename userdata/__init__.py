"""Cached facade over the upstream users API."""

from .cache import DEFAULT_TTL_SECONDS, TTLCache
from .config import Settings, get_settings
from .logging_config import configure_logging
from .models import LookupFailure, LookupResult, LookupSuccess, UserRecord
from .service import UserDataService, cache_key_for

__all__ = [
    "DEFAULT_TTL_SECONDS",
    "LookupFailure",
    "LookupResult",
    "LookupSuccess",
    "Settings",
    "TTLCache",
    "UserDataService",
    "UserRecord",
    "cache_key_for",
    "configure_logging",
    "get_settings",
]
