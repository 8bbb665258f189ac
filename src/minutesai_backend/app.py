# Application factory and FastAPI setup.

from fastapi import FastAPI

from .routers import flows, health, videos
from .settings import get_settings


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    app = FastAPI(title="MinutesAI Backend", version="0.1.0")

    app.state.settings = get_settings()

    app.include_router(health.router)
    app.include_router(flows.router)
    app.include_router(videos.router)
    return app
