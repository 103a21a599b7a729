import logging
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hive_api.api import readings
from hive_api.config.settings import Settings, get_settings
from hive_api.core.errors import (
    StorageConflictError,
    StorageUnavailableError,
    ValidationError,
)
from hive_api.core.redis_client import create_redis_client
from hive_api.services.ingestion_service import IngestionService
from hive_api.services.mqtt_subscriber import MqttSubscriber
from hive_api.services.query_service import QueryService
from hive_api.storage.reading_store import ReadingStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(settings: Settings) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=settings.log_level.upper(),
        format=LOG_FORMAT,
        handlers=handlers,
    )


def create_app(
    settings: Optional[Settings] = None,
    redis_client: Optional[redis.Redis] = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = redis_client if redis_client is not None else create_redis_client(settings)
        store = ReadingStore(client)
        app.state.ingestion_service = IngestionService(
            store, canonical_timestamps=settings.canonical_timestamps
        )
        app.state.query_service = QueryService(
            store, default_limit=settings.default_query_limit
        )

        subscriber = None
        if settings.mqtt_url:
            subscriber = MqttSubscriber(
                app.state.ingestion_service,
                settings.mqtt_url,
                topic=settings.mqtt_topic,
                client_id=settings.mqtt_client_id,
                reconnect_interval=settings.mqtt_reconnect_interval,
                max_reconnect_interval=settings.mqtt_max_reconnect_interval,
            )
            await subscriber.start()
        app.state.mqtt_subscriber = subscriber

        logger.info("Hive API started")
        yield
        if subscriber:
            await subscriber.stop()
        if redis_client is None:
            await client.aclose()
        logger.info("Hive API stopped")

    app = FastAPI(title="Hive API", version="1.0.0", lifespan=lifespan)
    app.include_router(readings.router, tags=["readings"])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "hive-api"}

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning(str(exc))
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(StorageConflictError)
    async def conflict_error_handler(request: Request, exc: StorageConflictError):
        logger.error(str(exc))
        return JSONResponse(status_code=409, content={"error": str(exc)})

    @app.exception_handler(StorageUnavailableError)
    async def unavailable_error_handler(request: Request, exc: StorageUnavailableError):
        logger.error(str(exc))
        return JSONResponse(status_code=503, content={"error": str(exc)})

    return app


configure_logging(get_settings())
app = create_app()
