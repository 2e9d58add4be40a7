"""Error types raised by the upstream client and the lookup service."""
from __future__ import annotations


class UserDataError(RuntimeError):
    """Base class for every failure the lookup pipeline can produce."""

    kind = "user_data"


class UpstreamStatusError(UserDataError):
    """The upstream API answered with something other than 200 OK."""

    kind = "upstream_status"

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Upstream returned status code {status_code}")
        self.status_code = status_code


class UpstreamTransportError(UserDataError):
    """The upstream API could not be reached (connection, DNS, TLS, timeout)."""

    kind = "upstream_transport"

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Failed to reach upstream: {cause}")
        self.cause = cause


class MalformedResponseError(UserDataError):
    """The upstream body is not a JSON object."""

    kind = "malformed_response"


class _FieldError(UserDataError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class SchemaViolationError(_FieldError):
    """A field required downstream is missing from the upstream payload."""

    kind = "schema_violation"

    def __init__(self, field: str) -> None:
        super().__init__(field, f"Required field '{field}' is missing from upstream response")


class ValidationError(_FieldError):
    """The payload cannot be turned into a user record."""

    kind = "validation"

    def __init__(self, field: str, reason: str = "is missing") -> None:
        super().__init__(field, f"User data field '{field}' {reason}")
