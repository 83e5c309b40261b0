"""FastAPI application entry point for the MGNREGA cache proxy."""

import logging
import sys
import time

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, settings
from errors import register_error_handlers
from services.cache_store import CacheStore
from services.data_gov import DataGovFetcher
from services.mgnrega import MgnregaService
from services.rate_limit import FixedWindowLimiter
from services.scheduler import DailyRefreshScheduler

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("mgnrega.access")


def create_app(
    app_settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    enable_scheduler: bool = True,
) -> FastAPI:
    app_settings = app_settings or settings
    app = FastAPI(title="MGNREGA Cache API", version="1.0.0")

    store = CacheStore(app_settings.cache_path)
    fetcher = DataGovFetcher(app_settings, store, transport=transport)
    service = MgnregaService(store, fetcher, ttl_seconds=app_settings.cache_ttl_seconds)
    limiter = FixedWindowLimiter(app_settings.rate_limit_max, app_settings.rate_limit_window_seconds)

    app.state.settings = app_settings
    app.state.mgnrega = service
    app.state.limiter = limiter
    app.state.scheduler = DailyRefreshScheduler(service, refresh_at=app_settings.refresh_at) if enable_scheduler else None

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Per-client ceiling on the data routes
    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if request.url.path.startswith("/api/"):
            client = request.client.host if request.client else "unknown"
            allowed, retry_after = limiter.hit(client)
            if not allowed:
                return JSONResponse(
                    {"error": "Too many requests, please try again later."},
                    status_code=429,
                    headers={"Retry-After": str(retry_after)},
                )
        return await call_next(request)

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if app_settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Access log
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        access_logger.info(
            "%s %s %d - %.1f ms", request.method, request.url.path, response.status_code, elapsed_ms
        )
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.health import router as health_router
    from routes.mgnrega import router as mgnrega_router

    app.include_router(health_router)
    app.include_router(mgnrega_router)

    @app.on_event("startup")
    async def _startup() -> None:
        missing = app_settings.validate()
        if missing:
            logger.warning("Missing env vars (upstream fetches will fail): %s", ", ".join(missing))
        store.ensure_directory()
        if app.state.scheduler is not None:
            app.state.scheduler.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        if app.state.scheduler is not None:
            await app.state.scheduler.stop()
        await service.shutdown()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("MGNREGA backend running on port %d", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
