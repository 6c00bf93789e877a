from contextlib import asynccontextmanager
from typing import Any, Optional, cast

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.responses import Response
from starlette.types import Scope

from homepage.core.config import Settings, settings as default_settings
from homepage.core.logging_config import get_logger
from homepage.core.errors import PostDecodeError, RenderError, SiteError, capture_exception
from homepage.api import blog, site
from homepage.middleware.context import RequestContextMiddleware
from homepage.services.post_store import PostStore
from homepage.services.renderer import PostRenderer

logger = get_logger(__name__)


class SiteFiles(StaticFiles):
    """Static files served for any request method, not just GET and HEAD."""

    async def get_response(self, path: str, scope: Scope) -> Response:
        if scope["method"] not in ("GET", "HEAD"):
            scope = {**scope, "method": "GET"}
        return await super().get_response(path, scope)


def error_response(message: str, status_code: int) -> PlainTextResponse:
    """Plain-text error body, newline terminated."""
    return PlainTextResponse(
        f"{message}\n",
        status_code=status_code,
        headers={"X-Content-Type-Options": "nosniff"},
    )


async def site_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    site_exc = cast(SiteError, exc)
    if isinstance(site_exc, (PostDecodeError, RenderError)):
        capture_exception(site_exc, context={"path": request.url.path})
    return error_response(site_exc.message, site_exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    capture_exception(exc, context={"path": request.url.path})
    return error_response("Internal Server Error", 500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the site application.

    The blog template is parsed here, before anything can be served. A
    missing or broken template raises TemplateLoadError.
    """
    settings = settings or default_settings
    renderer = PostRenderer.from_path(settings.TEMPLATE_PATH)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 50)
        logger.info(f"{settings.PROJECT_NAME} starting")
        logger.info(f"Template: {settings.TEMPLATE_PATH}")
        logger.info(f"Posts directory: {settings.POSTS_DIR}")
        logger.info(f"Site root: {settings.SITE_ROOT}")
        logger.info("=" * 50)
        yield

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.renderer = renderer
    app.state.post_store = PostStore(settings.POSTS_DIR)

    app.add_middleware(
        cast(Any, RequestContextMiddleware),
        slow_request_threshold_ms=settings.SLOW_REQUEST_THRESHOLD_MS,
    )

    app.add_exception_handler(SiteError, site_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(blog.router, tags=["blog"])
    app.include_router(site.router, tags=["site"])

    # Fallback: everything else is a file under the site root
    app.mount("/", SiteFiles(directory=settings.SITE_ROOT, html=True), name="static")

    return app
