"""Request identifier parsing."""
from __future__ import annotations

DEFAULT_USER_ID = 1


class InvalidUserIdError(ValueError):
    """Raised when a request carries an identifier that is not a positive integer."""


def parse_user_id(raw: str | None) -> int:
    """Turn the ``id`` query parameter into a positive integer.

    A missing parameter selects :data:`DEFAULT_USER_ID`.
    """

    if raw is None:
        return DEFAULT_USER_ID
    value = raw.strip()
    if not value.isascii() or not value.isdigit():
        raise InvalidUserIdError(f"Invalid user id: {raw!r}")
    user_id = int(value)
    if user_id < 1:
        raise InvalidUserIdError(f"Invalid user id: {raw!r}")
    return user_id
