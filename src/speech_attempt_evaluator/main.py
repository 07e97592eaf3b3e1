"""FastAPI application entry point."""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from speech_attempt_evaluator.api.routes import router
from speech_attempt_evaluator.config import (
    Settings,
    get_settings,
    get_thresholds_table,
    resolve_thresholds,
)


def configure_logging() -> None:
    """Configure structlog based on the ENV environment variable."""
    is_production = os.getenv("ENV", "development").lower() == "production"

    if is_production:
        # Production: JSON format for machine parsing
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )
    else:
        # Development: console format for human readability
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.dev.ConsoleRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API application.

    Routes read the settings and the resolved threshold table from
    ``app.state``; without explicit settings the cached application
    settings are used.
    """
    if settings is None:
        settings = get_settings()
        thresholds = get_thresholds_table()
    else:
        thresholds = resolve_thresholds(settings)
    app = FastAPI(title="Speech Attempt Evaluator", version="0.1.0")
    app.state.settings = settings
    app.state.thresholds = thresholds
    app.include_router(router)

    @app.middleware("http")
    async def auth_middleware(request: Request, call_next):
        """Optional APP_SECRET authentication; the health check stays open."""
        if not settings.app_secret or request.url.path == "/api/health":
            return await call_next(request)
        if request.headers.get("X-App-Secret", "") != settings.app_secret:
            return JSONResponse({"error": "Unauthorized"}, status_code=401)
        return await call_next(request)

    return app


configure_logging()
app = create_app()


def main() -> None:
    """Run the application."""
    settings = get_settings()
    uvicorn.run(
        "speech_attempt_evaluator.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
