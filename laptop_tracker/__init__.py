"""Application factory and top-level wiring for the laptop stock tracker.

Configuration, database setup, routers and error handling are brought
together here. The API is JSON only: stock units, grouped stock, sales and
dashboard reports under ``/api/v1``.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import (
    TrackerError,
    http_exception_handler,
    tracker_exception_handler,
    validation_exception_handler,
)
from .db.migrate import run_migrations
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware

# Importing the models registers their tables with ``Base.metadata``.
from .models import laptop as _laptop  # noqa: F401
from .routers import api_laptops, api_reports, api_sales


def create_app() -> FastAPI:
    application = FastAPI(title=settings.APP_NAME)

    if settings.ALLOWED_ORIGINS:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.ALLOWED_ORIGINS,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    application.add_middleware(RequestIdMiddleware)

    application.include_router(api_laptops.router)
    application.include_router(api_sales.router)
    application.include_router(api_reports.router)

    application.add_exception_handler(TrackerError, tracker_exception_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    return application


# New databases get the full schema; older SQLite files are upgraded in place.
Base.metadata.create_all(bind=engine)
run_migrations(engine)

app = create_app()

__all__ = ["app", "create_app"]
