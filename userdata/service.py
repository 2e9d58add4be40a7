"""User lookup service combining the upstream client with the TTL cache."""
from __future__ import annotations

import logging
from typing import Any, Dict

from userdata.cache import DEFAULT_TTL_SECONDS, CacheBackend
from userdata.clients.upstream import UpstreamClient
from userdata.errors import UserDataError, ValidationError
from userdata.models import LookupFailure, LookupResult, LookupSuccess, UserRecord

LOGGER = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "user_data_"
CACHE_TTL_SECONDS = DEFAULT_TTL_SECONDS


def cache_key_for(user_id: int) -> str:
    """Return the cache key holding the record for ``user_id``."""

    return f"{CACHE_KEY_PREFIX}{user_id}"


class UserDataService:
    """Serve user records from the cache, fetching upstream on a miss.

    Concurrent misses for the same id may each reach upstream; the last
    ``set`` wins and both records come from the same source.
    """

    def __init__(self, client: UpstreamClient, cache: CacheBackend) -> None:
        self._client = client
        self._cache = cache

    def get_user_data(self, user_id: int) -> UserRecord:
        """Return the record for ``user_id``.

        Raises:
            UserDataError: the client's errors unchanged, or ``ValidationError``
                when the payload cannot be turned into a record.
        """

        cache_key = cache_key_for(user_id)
        cached = self._cache.get(cache_key)
        if cached is not None:
            LOGGER.debug("cache hit", extra={"user_id": user_id, "cache_key": cache_key})
            return cached

        LOGGER.debug("cache miss", extra={"user_id": user_id, "cache_key": cache_key})
        raw = self._client.fetch_raw(user_id)
        record = build_record(raw)
        self._cache.set(cache_key, record, CACHE_TTL_SECONDS)
        return record

    def lookup(self, user_id: int) -> LookupResult:
        """Like ``get_user_data`` but reports pipeline failures as a value."""

        try:
            return LookupSuccess(self.get_user_data(user_id))
        except UserDataError as exc:
            return LookupFailure.from_error(exc)


def build_record(raw: Dict[str, Any]) -> UserRecord:
    """Validate ``raw`` again and flatten it into a :class:`UserRecord`."""

    for name in ("id", "name", "email"):
        if raw.get(name) is None:
            raise ValidationError(name)

    address = raw.get("address")
    if not isinstance(address, dict) or address.get("city") is None:
        raise ValidationError("address.city")

    company = raw.get("company")
    if not isinstance(company, dict) or company.get("name") is None:
        raise ValidationError("company.name")

    return UserRecord(
        id=_positive_int(raw["id"]),
        name=_non_empty(raw["name"], "name"),
        email=str(raw["email"]),
        city=str(address["city"]),
        company=str(company["name"]),
    )


def _positive_int(value: Any) -> int:
    # bool is an int subclass; floats would be silently truncated
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValidationError("id", "must be a positive integer")
    try:
        number = int(value)
    except ValueError as exc:
        raise ValidationError("id", "must be a positive integer") from exc
    if number < 1:
        raise ValidationError("id", "must be a positive integer")
    return number


def _non_empty(value: Any, name: str) -> str:
    text = str(value)
    if not text.strip():
        raise ValidationError(name, "must not be empty")
    return text
