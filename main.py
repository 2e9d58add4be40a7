"""FastAPI application that serves cached user records from the upstream API."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from userdata.cache import TTLCache
from userdata.clients.upstream import HttpUpstreamClient
from userdata.config import get_settings
from userdata.logging_config import configure_logging
from userdata.models import LookupFailure
from userdata.service import UserDataService
from userdata.utils import InvalidUserIdError, parse_user_id

settings = get_settings()
configure_logging(settings.log_level)
LOGGER = logging.getLogger(__name__)

cache = TTLCache()
service = UserDataService(HttpUpstreamClient(settings), cache)

SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


async def _sweep_periodically(interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        removed = cache.sweep()
        if removed:
            LOGGER.debug("swept %d expired cache entries", removed)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    task = None
    if settings.cache_sweep_interval_seconds > 0:
        task = asyncio.create_task(_sweep_periodically(settings.cache_sweep_interval_seconds))
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task


app = FastAPI(title="User Data API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):  # type: ignore[override]
    client_ip = request.client.host if request.client else "unknown"
    try:
        response = await call_next(request)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Unhandled exception", extra={"client_ip": client_ip})
        raise exc
    response.headers.update(SECURITY_HEADERS)
    return response


def get_service() -> UserDataService:
    """Provide the process-wide user data service."""

    return service


def _error(message: str, status_code: int, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        return _error("Method not allowed", 405, exc.headers)
    return _error(str(exc.detail), exc.status_code, exc.headers)


@app.get("/")
@app.get("/api/user")
def get_user(
    user_id: Optional[str] = Query(None, alias="id", description="Positive integer user id."),
    user_service: UserDataService = Depends(get_service),
):
    """Return the flattened record for the requested user."""

    try:
        parsed_id = parse_user_id(user_id)
    except InvalidUserIdError:
        return _error("Invalid user ID. Must be a positive integer.", 400)

    try:
        result = user_service.lookup(parsed_id)
    except Exception:  # noqa: BLE001
        LOGGER.exception("Failed to look up user", extra={"user_id": parsed_id})
        return _error("Internal server error", 500)

    if isinstance(result, LookupFailure):
        LOGGER.error(
            "Error processing request: %s",
            result.detail,
            extra={"user_id": parsed_id, "error_kind": result.kind},
        )
        return _error("Internal server error", 500)

    return result.record.to_dict()


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe; never touches the upstream API or the cache."""

    return JSONResponse(
        {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": "user-data-api",
        },
        headers={"Cache-Control": "no-cache"},
    )
