"""
Main API module for shortlink.

Responsibilities:
    - Expose REST endpoints to create, resolve (redirect) and delete mappings
    - Validate request bodies and render validation failures in the envelope
    - Map the core error taxonomy to HTTP status codes and envelope messages
    - Attach request ids and log every request

Routes:
    POST   /url            {"url": str, "alias"?: str} -> {"status": "OK", "alias": str}
    GET    /{alias}        302 redirect to the stored url
    DELETE /url/{alias}    {"status": "OK"}
    GET    /health         {"status": "ok"}

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Storage backend chosen from env (memory by default); swappable for SQLite/PostgreSQL.
    - MappingService owns the create/resolve/delete rules; handlers stay thin.
    - Basic auth guards the /url routes when a user is configured.
"""

import contextlib
import logging
from typing import Any, Dict, Optional, Set
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, field_validator

from auth import load_users, require_user
from shortlink import response
from shortlink.config import settings
from shortlink.errors import ErrorKind, InvalidRequestError, NotFoundError, ShortlinkError
from shortlink.manager.allocator import AliasAllocator
from shortlink.manager.generator import BaseAliasGenerator
from shortlink.manager.mapping_service import MappingService
from shortlink.middleware import LoggingMiddleware, RequestIDMiddleware, get_request_id
from shortlink.storage.base import BaseStorage
from shortlink.storage.storage_factory import get_storage

log = logging.getLogger("shortlink")

HTTP_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_UNIQUE: 409,
    ErrorKind.ALIAS_EXISTS: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORE_UNAVAILABLE: 500,
}

ALIAS_FORBIDDEN_CHARS = frozenset("/?#")


class URLRequest(BaseModel):
    """Request payload for creating a new mapping."""
    url: str
    alias: Optional[str] = None

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("url must be an absolute http(s) URL")
        return value

    @field_validator("alias")
    @classmethod
    def _validate_alias(cls, value: Optional[str]) -> Optional[str]:
        # A path segment only: anything else can never reach GET /{alias}.
        if value is not None and any(ch in value for ch in ALIAS_FORBIDDEN_CHARS):
            raise ValueError("alias must be a single path segment")
        return value


def create_app(
    storage: Optional[BaseStorage] = None,
    generator: Optional[BaseAliasGenerator] = None,
    users: Optional[Dict[str, str]] = None,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage: Backend to use; selected from SHORTLINK_STORAGE_BACKEND when omitted.
            Only a backend built here is closed on shutdown.
        generator: Alias candidate source; random Base62 when omitted.
        users: Basic-auth users for the /url routes; read from settings when
            omitted. An empty map leaves the routes open.

    Returns:
        FastAPI: A fully configured application instance with its own
                 storage and mapping service.

    Why an app factory?
        - Enables per-test isolation in pytest.
        - Encourages dependency injection and easy swapping of implementations.
        - Avoids accidental global state across workers/processes.
    """
    # basic console logging unless the host process already configured it
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=settings.LOG_LEVEL,
            format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        )

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    owns_storage = storage is None
    storage = storage if storage is not None else get_storage()
    allocator = AliasAllocator(
        storage,
        generator=generator,
        length=settings.ALIAS_LENGTH,
        max_attempts=settings.ALIAS_MAX_ATTEMPTS,
    )
    service = MappingService(storage=storage, allocator=allocator)

    @contextlib.asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        if owns_storage:
            storage.close()

    app = FastAPI(
        title="shortlink",
        description="URL shortener: alias allocation and persistent alias -> url mappings",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.storage = storage
    app.state.service = service

    # Added last runs first: the request id exists before the access log line.
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    users = load_users() if users is None else users
    write_dependencies = [Depends(require_user(users))] if users else []
    if users:
        log.info("Basic auth enabled for /url routes")

    # ----------------------------------------------------------------
    # Error rendering
    # ----------------------------------------------------------------
    @app.exception_handler(ShortlinkError)
    async def handle_shortlink_error(request: Request, exc: ShortlinkError) -> JSONResponse:
        request_id = get_request_id(request)
        if exc.kind is ErrorKind.STORE_UNAVAILABLE:
            log.error("store unavailable: %s request_id=%s", exc, request_id, exc_info=exc)
        else:
            log.info("%s: %s request_id=%s", exc.kind.value, exc, request_id)
        return JSONResponse(
            status_code=HTTP_STATUS_BY_KIND[exc.kind],
            content=response.error(exc.public_message),
        )

    @app.exception_handler(404)
    async def handle_unrouted(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content=response.error(NotFoundError.public_message))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        log.info("invalid request: %s request_id=%s", exc.errors(), get_request_id(request))
        return JSONResponse(status_code=400, content=response.validation_error(exc.errors()))

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    # Filled once every route is registered; these names never reach GET /{alias}.
    reserved_aliases: Set[str] = set()

    url_router = APIRouter(prefix="/url", dependencies=write_dependencies)

    @url_router.post("")
    def save_url(req: URLRequest) -> Dict[str, Any]:
        """
        Create a mapping for `req.url`, under `req.alias` or a generated alias.

        Returns:
            dict: {"status": "OK", "alias": <alias>}

        Errors (envelope):
            400 "field alias is not valid"  alias shadowed by a fixed route
            409 "not unique alias"          generated alias collided
            409 "alias already exists"      requested alias is taken
            500 "internal error"            storage failure
        """
        if req.alias in reserved_aliases:
            raise InvalidRequestError("field alias is not valid")
        mapping = service.create_mapping(req.url, req.alias)
        return response.ok(alias=mapping.alias)

    @url_router.delete("/{alias}")
    def delete_url(alias: str) -> Dict[str, Any]:
        """Delete the mapping for `alias`; 404 envelope when nothing was mapped."""
        service.delete_mapping(alias)
        return response.ok()

    app.include_router(url_router)

    @app.get("/{alias}")
    def redirect(alias: str) -> RedirectResponse:
        """Redirect (302) to the url stored under `alias`."""
        return RedirectResponse(url=service.resolve_alias(alias), status_code=302)

    reserved_aliases.update(
        route.path.strip("/") for route in app.routes if "{" not in route.path and route.path != "/"
    )

    return app


# `uvicorn main:app` and `from main import app` keep working.
app = create_app()
