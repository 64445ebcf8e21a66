import logging
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from telemetry_api.api import telemetry, update
from telemetry_api.api.deps import get_telemetry_store
from telemetry_api.config.settings import Settings, get_settings
from telemetry_api.core.errors import ClientValidationError, StartupError, StorageError
from telemetry_api.core.redis_client import close_redis_client, open_redis_client
from telemetry_api.middleware.access_log import AccessLogMiddleware
from telemetry_api.middleware.body_limit import BodySizeLimitMiddleware
from telemetry_api.storage.telemetry_store import TelemetryStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        raise StartupError(f"Invalid configuration (is REDIS_URL set?): {exc}") from exc


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.settings is None:
        app.state.settings = load_settings()
    settings = app.state.settings
    logging.getLogger().setLevel(settings.log_level.upper())

    owns_client = app.state.redis is None
    if owns_client:
        app.state.redis = await open_redis_client(settings)

    logger.info("Telemetry API started")
    yield

    if owns_client:
        await close_redis_client(app.state.redis)
        app.state.redis = None
    logger.info("Telemetry API stopped")


def create_app(
    settings: Optional[Settings] = None,
    redis_client: Optional[redis.Redis] = None,
) -> FastAPI:
    app = FastAPI(title="Telemetry API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.redis = redis_client

    app.add_middleware(BodySizeLimitMiddleware)
    app.add_middleware(AccessLogMiddleware)

    app.include_router(telemetry.router, prefix="/api/telemetry", tags=["telemetry"])
    app.include_router(update.router, prefix="/api/update", tags=["devices"])

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "Telemetry API OK"

    @app.get("/health")
    async def health_check(store: TelemetryStore = Depends(get_telemetry_store)):
        try:
            await store.ping()
        except StorageError:
            logger.exception("Health check failed")
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "storage": "unavailable"},
            )
        return {"status": "healthy", "storage": "ok"}

    @app.exception_handler(ClientValidationError)
    async def client_error_handler(request: Request, exc: ClientValidationError):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc
        )
        return JSONResponse(status_code=500, content={"error": "internal"})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(
            "%s %s failed unexpectedly", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(status_code=500, content={"error": "internal"})

    return app


app = create_app()


def serve():
    try:
        settings = load_settings()
    except StartupError as exc:
        logger.error("%s", exc)
        raise SystemExit(1)

    uvicorn.run(
        "telemetry_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
