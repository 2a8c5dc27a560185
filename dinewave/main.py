"""FastAPI entrypoint for the restaurant messaging service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dinewave.api.v1.api import api_router
from dinewave.core.config import settings
from dinewave.core.errors import DinewaveError, domain_error_to_http
from dinewave.db.session import Database
from dinewave.services.geocoding import Geocoder

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(database: Database | None = None, geocoder: Geocoder | None = None) -> FastAPI:
    """Build the application; the store client and geocoder are created here, never at import."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database(settings.database_url, echo=settings.debug)
        db.connect()
        db.create_all()
        app.state.database = db
        app.state.geocoder = geocoder or Geocoder(settings.google_maps_api_key)
        logger.info("[BOOTSTRAP] %s started (env=%s)", settings.app_name, settings.app_env)
        try:
            yield
        finally:
            db.disconnect()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(api_router, prefix="/api/v1")

    @app.exception_handler(DinewaveError)
    async def handle_domain_error(request: Request, exc: DinewaveError) -> JSONResponse:
        http_exc = domain_error_to_http(exc)
        if http_exc.status_code >= 500:
            logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


configure_logging()
app = create_app()
