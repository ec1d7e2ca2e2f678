"""FastAPI application entry point."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import health, regions, travel_times
from .config import settings
from .persistence.session import SessionStore
from .services.traveltime.cache import RouteCache


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Route cache lives as long as this app instance and is never persisted.
    app.state.route_cache = RouteCache.from_settings(SessionStore(), settings)

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(travel_times.router, prefix=settings.api_prefix)
    app.include_router(regions.router, prefix=settings.api_prefix)
    return app


app = create_app()
