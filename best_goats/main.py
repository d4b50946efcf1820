import logging
import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from best_goats.api import favorites, images, pages
from best_goats.exceptions import AppError, MethodNotAllowedError
from best_goats.kv import build_stores, close_redis
from best_goats.rendering import PageRenderer
from best_goats.routing import RouteDispatchMiddleware
from best_goats.schemas.error import ErrorType
from best_goats.services.catalog_service import CatalogService
from best_goats.settings import AppSettings, get_settings
from best_goats.utils.error_responses import build_error_page, render_error_response
from best_goats.utils.request_context import (
    RequestIdLogFilter,
    clear_request_id,
    get_request_id,
    set_request_id,
)
from best_goats.warmup import warmup_all

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"

logger = logging.getLogger(__name__)

_STATUS_ERROR_TYPES: dict[int, ErrorType] = {
    status.HTTP_400_BAD_REQUEST: ErrorType.BAD_REQUEST,
    status.HTTP_404_NOT_FOUND: ErrorType.NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorType.METHOD_NOT_ALLOWED,
}


def configure_logging(settings: AppSettings) -> None:
    """Configure root logging once and expose request IDs on every record."""

    logging.basicConfig(level=settings.log_level_numeric, format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdLogFilter) for f in handler.filters):
            handler.addFilter(RequestIdLogFilter())


def _validate_environment(settings: AppSettings) -> None:
    """Log warnings for optional configuration left at risky defaults."""

    warnings = settings.optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning(f"  • {warning}")
        logger.warning("=" * 60)


def _renderer_for(request: Request) -> PageRenderer:
    app = request.scope.get("app")
    renderer = getattr(getattr(app, "state", None), "renderer", None)
    if renderer is None:
        renderer = PageRenderer.from_settings(get_settings())
    return renderer


def _error_response(
    request: Request,
    *,
    error_type: ErrorType,
    status_code: int,
    message: str | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    renderer = _renderer_for(request)
    page = build_error_page(
        error_type=error_type,
        status_code=status_code,
        message=message,
        path=str(request.url.path),
        site_title=renderer.site_title,
    )
    return render_error_response(renderer, page, headers=headers)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration, warm up the stores, and release pools on shutdown."""
    settings: AppSettings = app.state.settings
    _validate_environment(settings)

    logger.info("=" * 60)
    logger.info("Best Goats - Store Preflight Check")
    logger.info("=" * 60)
    logger.info(f"Store backend: {settings.store_backend.upper()}")
    logger.info(
        f"Namespaces: catalog={settings.catalog_namespace!r} "
        f"favorites={settings.favorites_namespace!r}"
    )
    logger.info(f"Image origin: {settings.normalized_image_origin}")

    await warmup_all(
        catalog_store=app.state.catalog_store,
        favorites_store=app.state.favorites_store,
        catalog_service=CatalogService(
            app.state.catalog_store, catalog_key=settings.catalog_key
        ),
    )

    yield

    logger.info("Shutting down Best Goats")
    await app.state.http_client.aclose()
    await close_redis(app.state.redis)


async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    token = set_request_id(request_id)
    try:
        response = await call_next(request)
    except Exception as exc:
        response = await generic_exception_handler(request, exc)
    finally:
        clear_request_id(token)
    response.headers["X-Request-ID"] = request_id
    return response


async def app_error_handler(request: Request, exc: AppError) -> Response:
    """Render any :class:`AppError` as the HTML error page."""
    status_code = int(exc.status_code)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "%s for request %s to %s: %s",
            type(exc).__name__,
            get_request_id(),
            request.url.path,
            exc.message,
        )
    else:
        logger.info(
            "%s for request %s to %s: %s",
            type(exc).__name__,
            get_request_id(),
            request.url.path,
            exc.message,
        )

    headers = None
    if isinstance(exc, MethodNotAllowedError):
        headers = {"Allow": exc.allowed_method}
    return _error_response(
        request,
        error_type=exc.error_type,
        status_code=status_code,
        message=exc.message,
        headers=headers,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """Render framework-raised HTTP errors (e.g. unmatched sub-paths) as HTML."""
    error_type = _STATUS_ERROR_TYPES.get(exc.status_code, ErrorType.INTERNAL_ERROR)
    return _error_response(
        request,
        error_type=error_type,
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> Response:
    """Malformed request bodies are the visitor's problem: 400."""
    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(exc.errors()),
    )
    return _error_response(
        request,
        error_type=ErrorType.BAD_REQUEST,
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Invalid request parameters",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle all other unhandled exceptions."""
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )
    return _error_response(
        request,
        error_type=ErrorType.INTERNAL_ERROR,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Build the application and every process-wide collaborator it needs."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Best Goats",
        version="0.1.0",
        description="Catalog browsing with anonymous, rotating-token favorites.",
        lifespan=lifespan,
        redirect_slashes=False,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    renderer = PageRenderer.from_settings(settings)
    catalog_store, favorites_store, redis_client = build_stores(settings)

    app.state.settings = settings
    app.state.renderer = renderer
    app.state.catalog_store = catalog_store
    app.state.favorites_store = favorites_store
    app.state.redis = redis_client
    app.state.http_client = httpx.AsyncClient(follow_redirects=True)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Added first so the request-ID middleware wraps it and tags its responses too.
    app.add_middleware(RouteDispatchMiddleware, renderer=renderer)
    app.middleware("http")(add_request_id)

    app.include_router(pages.router, tags=["pages"])
    app.include_router(favorites.router, tags=["favorites"])
    app.include_router(images.router, tags=["images"])
    return app


app = create_app()
