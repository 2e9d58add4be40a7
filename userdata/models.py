"""Domain objects returned by the lookup service."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

from userdata.errors import UserDataError


@dataclass(frozen=True)
class UserRecord:
    """Flattened user data served to clients."""

    id: int
    name: str
    email: str
    city: str
    company: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "city": self.city,
            "company": self.company,
        }


@dataclass(frozen=True)
class LookupSuccess:
    record: UserRecord


@dataclass(frozen=True)
class LookupFailure:
    kind: str
    detail: str
    error: UserDataError

    @classmethod
    def from_error(cls, error: UserDataError) -> "LookupFailure":
        return cls(kind=error.kind, detail=str(error), error=error)


LookupResult = Union[LookupSuccess, LookupFailure]
