# page_translator/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from page_translator.api.deps import get_workspace
from page_translator.core.config import settings
from page_translator.core.logging_config import configure_logging
from page_translator.middleware.request_logging import RequestLoggingMiddleware
from page_translator.routers.health import router as health_router
from page_translator.routers.pages import router as pages_router
from page_translator.routers.reports import router as reports_router
from page_translator.core.exception_handlers import (
    app_error_handler,
    unhandled_exception_handler,
    validation_error_handler,
)
from page_translator.core import AppError

configure_logging()


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # In-flight translations and audits finish before the event loop closes
    workspace = app.dependency_overrides.get(get_workspace, get_workspace)()
    await workspace.controller.wait_idle()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.add_middleware(RequestLoggingMiddleware)

    # CORS_ALLOW_ORIGINS="http://localhost:3000,https://translator.example.com"
    allow_origins = _split_csv(settings.CORS_ALLOW_ORIGINS) or ["http://localhost:3000"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["content-disposition", "x-request-id"],
    )

    # Exception handlers
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers
    app.include_router(health_router)
    app.include_router(pages_router)
    app.include_router(reports_router)

    return app


app = create_app()
