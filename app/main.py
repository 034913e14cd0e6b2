from __future__ import annotations

import time
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import Settings, settings as default_settings
from app.core.db import create_engine, create_sessionmaker, init_models, ping
from app.core.logging import configure_logging, get_logger
from app.core.scheduler import start_scheduler, shutdown_scheduler
from app.api.public import router as public_router
from app.services.fetcher import Fetcher
from app.services.normalize import iso_timestamp
from app.services.scrape import ScrapeService
from app.services.snapshot import SnapshotArchive

logger = get_logger(__name__)

def create_app(cfg: Settings | None = None, fetcher: Fetcher | None = None) -> FastAPI:
    cfg = cfg or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(cfg.log_level, json_output=cfg.log_json or cfg.is_production)

        engine = create_engine(cfg)
        await init_models(engine)
        sessionmaker = create_sessionmaker(engine)

        archive = SnapshotArchive(cfg.storage_dir, cfg.snapshot_retention)
        archive.ensure_directory()

        service = ScrapeService.from_settings(cfg, sessionmaker, fetcher=fetcher, archive=archive)

        app.state.settings = cfg
        app.state.engine = engine
        app.state.sessionmaker = sessionmaker
        app.state.archive = archive
        app.state.scrape_service = service
        app.state.scheduler = None
        if cfg.scheduler_enabled:
            app.state.scheduler = start_scheduler(service, cfg.scrape_interval_minutes)

        logger.info(
            "app_startup",
            environment=cfg.environment,
            database=engine.url.render_as_string(hide_password=True),
            storage=str(archive.directory),
        )
        yield

        logger.info("app_shutdown")
        shutdown_scheduler(app.state.scheduler)
        # Drains the connection pool
        await engine.dispose()

    app = FastAPI(title=cfg.app_name, version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
        body = {"success": False, "message": "Internal server error", "error": str(exc)}
        if not cfg.is_production:
            body["details"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(status_code=500, content=body)

    app.include_router(public_router)

    @app.get("/health")
    async def health(request: Request):
        return {
            "status": "OK",
            "timestamp": iso_timestamp(),
            "db_connected": await ping(request.app.state.engine),
            "storage": request.app.state.archive.status(),
        }

    return app

app = create_app()
