from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI

from app.api import base_router, router
from datastore.influx_store import ReadingStore, build_default_store
from logging_config import configure_logging
from services.gateway import GatewayService
from settings import ConfigurationError, get_settings

logger = logging.getLogger(__name__)


def create_app(store: Optional[ReadingStore] = None) -> FastAPI:
    """Build the store gateway; ``store`` replaces the InfluxDB-backed default."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        gateway = GatewayService(store if store is not None else build_default_store())
        app.state.gateway = gateway
        try:
            yield
        finally:
            if store is None:
                gateway.close()
                build_default_store.cache_clear()

    app = FastAPI(
        title="Humidity Store Gateway",
        description="Writes and queries humidity readings in a time-series database.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    app.include_router(base_router)
    return app


app = create_app()


def run() -> None:
    configure_logging()
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        logger.error("Store gateway cannot start", extra={"reason": str(exc)})
        raise SystemExit(str(exc)) from exc
    logger.info("Listening on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
