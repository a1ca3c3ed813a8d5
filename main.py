"""
Main API module for the short link service.

Responsibilities:
    - Expose REST endpoints for creating short links and redirecting
    - Funnel every error through one responder that renders {message, stack?}
    - Own the storage lifecycle: open at startup, close on shutdown

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - In-memory storage by default; PostgreSQL when configured.
    - LinkManager carries validation, slug assignment, and conflict mapping;
      routes only translate between HTTP and the manager.

Run:
    python main.py            # uses PORT (default 1337) and SHORTLINK_ENV
    uvicorn main:create_app --factory --reload
"""

import logging
import signal
import sys
import traceback
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlink.config import Settings
from shortlink.errors import LinkServiceError
from shortlink.logging_config import LOGGER_NAME, setup_logging
from shortlink.manager.link_manager import LinkManager
from shortlink.manager.slugs import get_slug_strategy
from shortlink.middleware import AccessLogMiddleware, ErrorBoundaryMiddleware, SecurityHeadersMiddleware
from shortlink.models import ErrorOut, LinkIn, LinkOut
from shortlink.storage.base import BaseStorage
from shortlink.storage.storage_factory import get_storage

log = logging.getLogger(LOGGER_NAME)


def get_manager(request: Request) -> LinkManager:
    """Dependency returning the manager bound to this app instance."""
    return request.app.state.manager


def _format_stack(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def _request_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "Invalid request body")
    return f"{loc}: {msg}" if loc else msg


def create_app(settings: Optional[Settings] = None, storage: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        settings: Runtime settings; read from the environment when omitted.
        storage: Storage backend; selected from settings when omitted.
            It is opened in the lifespan startup and closed on shutdown.

    Returns:
        FastAPI: A configured application with its own storage and manager.
    """
    settings = settings or Settings.from_env()

    if not logging.getLogger(LOGGER_NAME).handlers:
        setup_logging(settings.effective_log_level)

    if storage is None:
        storage = get_storage(settings.storage_backend, dsn=settings.db_dsn)
    manager = LinkManager(storage=storage, slug_strategy=get_slug_strategy(settings.slug_length))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("Starting short link service (%s mode)", settings.env)
        storage.open()
        try:
            yield
        finally:
            log.info("Shutting down short link service")
            storage.close()

    app = FastAPI(
        title="Short Link Service",
        description="Maps short slugs to long URLs and redirects to them",
        # two path segments so they never shadow a slug
        docs_url="/url/docs",
        openapi_url="/url/openapi.json",
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.manager = manager

    # ----------------------------------------------------------------
    # Error responder
    # ----------------------------------------------------------------
    def _error_response(exc: BaseException, status_code: int, message: str) -> JSONResponse:
        if status_code >= 500:
            log.error("%s: %s", type(exc).__name__, message, exc_info=exc)
        else:
            log.info("%s (%s): %s", type(exc).__name__, status_code, message)
        stack = _format_stack(exc) if settings.is_development else None
        body = ErrorOut(message=message, stack=stack)
        return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))

    @app.exception_handler(LinkServiceError)
    async def handle_service_error(request: Request, exc: LinkServiceError):
        return _error_response(exc, exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return _error_response(exc, 400, _request_validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error_response(exc, exc.status_code, str(exc.detail))

    def _unexpected_response(exc: Exception) -> JSONResponse:
        return _error_response(exc, 500, str(exc) or type(exc).__name__)

    # only reached for errors raised by middleware outside the boundary
    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        return _unexpected_response(exc)

    # ----------------------------------------------------------------
    # Middleware (last added runs first)
    # ----------------------------------------------------------------
    # innermost, so 500s still pass through CORS, security headers and the access log
    app.add_middleware(ErrorBoundaryMiddleware, responder=_unexpected_response)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SecurityHeadersMiddleware, hsts=not settings.is_development)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    if settings.is_development:
        app.add_middleware(AccessLogMiddleware)

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.post("/url", status_code=201, response_model=LinkOut)
    def create_link(body: LinkIn, manager: LinkManager = Depends(get_manager)) -> LinkOut:
        """
        Create a short link.

        Body: {"slug"?: str, "url": str}. Fields other than slug and url
        are ignored. Responds 201 with {slug, url, _id}.
        """
        link = manager.create_link(body.model_dump(exclude_unset=True))
        return LinkOut.from_link(link)

    @app.get("/{slug}")
    def redirect_link(slug: str, manager: LinkManager = Depends(get_manager)) -> RedirectResponse:
        """Redirect (302 Found) to the URL stored for `slug`, or 404."""
        link = manager.resolve(slug)
        return RedirectResponse(url=link.url, status_code=302)

    return app


class GracefulServer(uvicorn.Server):
    """uvicorn server that logs the signal as soon as shutdown begins."""

    def handle_exit(self, sig, frame):
        log.info("Received %s, shutting down gracefully...", signal.Signals(sig).name)
        super().handle_exit(sig, frame)


def run(settings: Optional[Settings] = None) -> int:
    """
    Process entry point. Returns the exit status.

    SIGTERM/SIGINT ask uvicorn to stop accepting connections and let in-flight
    requests finish; the lifespan then closes the store. Anything escaping the
    server, including a store that fails to open, is logged and yields 1.
    """
    settings = settings or Settings.from_env()
    logger = setup_logging(settings.effective_log_level)

    try:
        app = create_app(settings)
        config = uvicorn.Config(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.effective_log_level.lower(),
            access_log=False,
        )
        server = GracefulServer(config)

        logger.info("App starting on port %s", settings.port)
        server.run()
    except Exception:
        logger.critical("Uncaught exception, shutting down server", exc_info=True)
        return 1

    if not server.started:
        logger.critical("Server failed to start")
        return 1
    logger.info("Process terminated")
    return 0


if __name__ == "__main__":
    sys.exit(run())
