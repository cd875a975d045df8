from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.proxy import router as proxy_router
from app.web import router as web_router
from logging_config import configure_logging
from services.proxy import ProxyService
from settings import ConfigurationError, get_dashboard_settings

logger = logging.getLogger(__name__)


def create_dashboard_app(proxy: Optional[ProxyService] = None) -> FastAPI:
    """Build the dashboard and its proxy endpoint."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        service = proxy
        if service is None:
            service = ProxyService(get_dashboard_settings().gateway_url)
        app.state.proxy = service
        try:
            yield
        finally:
            if proxy is None:
                await service.aclose()

    app = FastAPI(
        title="Humidity Dashboard",
        description="Charts humidity readings fetched through the store gateway proxy.",
        version="0.1.0",
        lifespan=lifespan,
    )
    static_dir = Path(__file__).resolve().parent.parent / "static"
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
    app.include_router(proxy_router)
    app.include_router(web_router)
    return app


app = create_dashboard_app()


def run() -> None:
    configure_logging()
    try:
        settings = get_dashboard_settings()
    except ConfigurationError as exc:
        logger.error("Dashboard cannot start", extra={"reason": str(exc)})
        raise SystemExit(str(exc)) from exc
    logger.info("Listening on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
