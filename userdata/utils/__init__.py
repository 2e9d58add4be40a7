"""Utility helpers."""
from .ids import DEFAULT_USER_ID, InvalidUserIdError, parse_user_id  # noqa: F401
