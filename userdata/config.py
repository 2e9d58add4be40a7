"""Application settings and environment loading utilities."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

DEFAULT_UPSTREAM_BASE_URL = "https://jsonplaceholder.typicode.com"


def _load_dotenv() -> None:
    env_path = Path(".env")
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


_load_dotenv()


def _validate_non_empty(value: Optional[str], name: str) -> str:
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _read_seconds(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        seconds = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number of seconds, got {raw!r}") from exc
    if seconds < 0:
        raise RuntimeError(f"{name} must not be negative, got {raw!r}")
    return seconds


@dataclass(frozen=True)
class Settings:
    """Runtime configuration derived from environment variables."""

    upstream_base_url: str = DEFAULT_UPSTREAM_BASE_URL
    connect_timeout_seconds: float = 5
    read_timeout_seconds: float = 10
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    cache_sweep_interval_seconds: float = 300
    log_level: str = "INFO"

    @property
    def base_url(self) -> str:
        return self.upstream_base_url.rstrip("/")

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.connect_timeout_seconds, self.read_timeout_seconds)

    @classmethod
    def from_env(cls) -> "Settings":
        base_url = _validate_non_empty(
            os.getenv("USERDATA_UPSTREAM_BASE_URL", DEFAULT_UPSTREAM_BASE_URL),
            "USERDATA_UPSTREAM_BASE_URL",
        )
        origins = [
            origin.strip()
            for origin in os.getenv("USERDATA_CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]

        return cls(
            upstream_base_url=base_url,
            connect_timeout_seconds=_read_seconds("USERDATA_CONNECT_TIMEOUT_SECONDS", "5"),
            read_timeout_seconds=_read_seconds("USERDATA_READ_TIMEOUT_SECONDS", "10"),
            cors_origins=origins or ["*"],
            cache_sweep_interval_seconds=_read_seconds(
                "USERDATA_CACHE_SWEEP_INTERVAL_SECONDS", "300"
            ),
            log_level=os.getenv("USERDATA_LOG_LEVEL", "INFO").upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings.from_env()
