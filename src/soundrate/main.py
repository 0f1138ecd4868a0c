"""FastAPI application factory and server entry point."""

import uvicorn
from fastapi import FastAPI

from soundrate import __version__
from soundrate.api.exception_handlers import register_exception_handlers
from soundrate.api.routers import api_router, health
from soundrate.config import Settings, get_settings
from soundrate.infrastructure.lifecycle import lifespan
from soundrate.infrastructure.observability import RequestLoggingMiddleware


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Explicit settings (tests); defaults to get_settings()

    Returns:
        Configured application. Database, token cache and catalog client are
        created by the lifespan, not here.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="SoundRate",
        description="Rate and review music, follow friends, discover new releases.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")
    app.include_router(health.router)
    return app


def run() -> None:
    """Run the API server (console script entry point)."""
    settings = get_settings()
    uvicorn.run(
        "soundrate.main:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
