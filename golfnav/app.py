from __future__ import annotations

import os
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from golfnav import __version__
from golfnav.api.health import health
from golfnav.api.routers.courses import router as courses_router
from golfnav.api.routers.locations import router as locations_router
from golfnav.api.routers.targets import router as targets_router
from golfnav.metrics import MetricsMiddleware, metrics_app


def _cors_origins() -> List[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost,http://127.0.0.1")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app() -> FastAPI:
    application = FastAPI(title="golfnav", version=__version__)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    application.add_middleware(MetricsMiddleware)

    for router in (locations_router, courses_router, targets_router):
        application.include_router(router)
    application.add_api_route("/health", health, methods=["GET"], tags=["health"])
    application.add_api_route(
        "/metrics", metrics_app, methods=["GET"], include_in_schema=False
    )
    return application


app = create_app()

__all__ = ["app", "create_app"]
