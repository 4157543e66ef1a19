from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from loguru import logger

from pagepeek import __version__
from pagepeek.gateway.api.v1 import routers as v1_routers
from pagepeek.gateway.config import Settings, get_settings
from pagepeek.gateway.exceptions import APIError
from pagepeek.gateway.logging_config import (
    RequestContextMiddleware,
    api_error_handler,
    request_validation_error_handler,
    unhandled_exception_handler,
)
from pagepeek.gateway.preview.cache import PreviewCache
from pagepeek.gateway.preview.pipeline import PreviewPipeline


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.dependency_overrides[get_settings]()
    assert isinstance(settings, Settings)

    if not settings.basepath.is_dir():
        logger.warning(f"Storage root {settings.basepath} does not exist, every preview will be a placeholder or 404")

    executor = ThreadPoolExecutor(max_workers=settings.render_workers, thread_name_prefix="preview-render")
    cache = PreviewCache(settings.cache_max_entries) if settings.cache_max_entries else None
    app.state.preview_pipeline = PreviewPipeline(
        settings.basepath,
        executor=executor,
        render_timeout_seconds=settings.render_timeout_seconds,
        cache=cache,
    )
    logger.info(f"Serving previews from {settings.basepath} (environment={settings.environment})")

    yield

    # Abandoned (timed-out) renders may still be running
    executor.shutdown(wait=False, cancel_futures=True)


def create_app(
    settings: Settings | None = None,
) -> FastAPI:
    if settings is None:
        settings = Settings()  # type: ignore

    docs_enabled = settings.is_development
    app = FastAPI(
        title="pagepeek",
        version=__version__,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        docs_url="/swagger" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    app.state.started_at = datetime.now(UTC)

    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    for r in v1_routers:
        app.include_router(r)

    return app
