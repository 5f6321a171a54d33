from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from event_aggregator.core.logger import get_logger
from event_aggregator.domain.errors import BackendUnavailable, QueueTimeout

logger = get_logger("api.errors")


async def _queue_timeout(request: Request, exc: QueueTimeout):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "event queue is full, retry later"},
        headers={"Retry-After": str(max(1, int(exc.timeout)))},
    )


async def _backend_unavailable(request: Request, exc: BackendUnavailable):
    logger.error(
        "storage_backend_unavailable",
        extra={"path": request.url.path, "error": str(exc)},
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "storage backend unavailable"},
    )


async def _validation_error(request: Request, exc: RequestValidationError):
    fields = sorted(
        {str(err["loc"][-1]) for err in exc.errors() if err.get("loc")}
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "invalid request", "fields": fields},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QueueTimeout, _queue_timeout)  # type: ignore[arg-type]
    app.add_exception_handler(BackendUnavailable, _backend_unavailable)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error)  # type: ignore[arg-type]
