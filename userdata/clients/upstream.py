"""Client for the upstream users REST API."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import requests
from requests import Response

from userdata.config import Settings
from userdata.errors import (
    MalformedResponseError,
    SchemaViolationError,
    UpstreamStatusError,
    UpstreamTransportError,
)

LOGGER = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "name", "email", "address", "company")
NESTED_FIELDS = (("address", "city"), ("company", "name"))


class UpstreamClient(Protocol):
    """Fetches the raw user payload for one identifier."""

    def fetch_raw(self, user_id: int) -> Dict[str, Any]: ...


class HttpUpstreamClient:
    """Fetch users over HTTP and reject payloads the service cannot use."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def fetch_raw(self, user_id: int) -> Dict[str, Any]:
        """Return the upstream payload for ``user_id`` once its shape is checked."""

        url = f"{self._settings.base_url}/users/{user_id}"
        try:
            response = self._session.get(url, timeout=self._settings.timeout)
        except requests.RequestException as exc:
            LOGGER.error("upstream request failed", extra={"user_id": user_id})
            raise UpstreamTransportError(exc) from exc

        self._raise_for_status(response, user_id)

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Upstream response is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise MalformedResponseError("Upstream response is not a JSON object")

        return validate_payload(payload)

    def _raise_for_status(self, response: Response, user_id: int) -> None:
        status = response.status_code
        if status == 200:
            return
        LOGGER.warning("upstream returned error status", extra={"status": status, "user_id": user_id})
        raise UpstreamStatusError(status)


def validate_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Ensure the fields needed to build a user record are present and nested."""

    for name in REQUIRED_FIELDS:
        if name not in data:
            raise SchemaViolationError(name)

    for parent, child in NESTED_FIELDS:
        nested = data[parent]
        if not isinstance(nested, dict) or child not in nested:
            raise SchemaViolationError(f"{parent}.{child}")

    return data
