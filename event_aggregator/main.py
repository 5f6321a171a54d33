import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator

from event_aggregator import __version__
from event_aggregator.api.errors import register_exception_handlers
from event_aggregator.api.router import api_router
from event_aggregator.core.config import settings
from event_aggregator.core.logger import get_logger
from event_aggregator.core.logging_config import configure_logging
from event_aggregator.infrastructure.storage import build_storage
from event_aggregator.services.aggregator_service import AggregatorService

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info(
        "aggregator_service_starting",
        extra={
            "queue_capacity": settings.queue_capacity,
            "enqueue_timeout_s": settings.enqueue_timeout_seconds,
        },
    )
    storage = await build_storage(settings)
    app.state.aggregator = AggregatorService(
        storage,
        settings.queue_capacity,
        settings.enqueue_timeout_seconds,
    )
    app.state.aggregator.start()
    try:
        yield
    finally:
        logger.info("aggregator_service_stopping")
        await app.state.aggregator.stop()
        await storage.close()
        logger.info("aggregator_service_stopped")


app = FastAPI(title="Event Aggregator", version=__version__, lifespan=lifespan)
register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "http_request",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
        },
    )
    return response


Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/docs", "/openapi.json", "/metrics"],
).instrument(app)

app.include_router(api_router)


@app.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
