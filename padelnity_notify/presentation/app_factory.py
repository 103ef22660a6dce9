from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from padelnity_notify.config import settings
from padelnity_notify.container import toast_engine
from padelnity_notify.infrastructure.logging_setup import init_logging
from padelnity_notify.infrastructure.metrics.metrics import setup_metrics
from padelnity_notify.presentation.api.overlay_routes import router as overlay_router
from padelnity_notify.presentation.api.routes import router as api_router


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    # Initialize logging before app construction to capture startup logs
    init_logging()
    app = FastAPI(title=settings.app_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    app.include_router(overlay_router)

    # Prometheus metrics (/metrics) + toast counters
    setup_metrics(app)

    @app.on_event("startup")
    async def _startup() -> None:
        logger.info("application startup")
        engine = toast_engine()
        if not engine.initialized:
            engine.init()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        logger.info("application shutdown")
        toast_engine().shutdown()

    return app
