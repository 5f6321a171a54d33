from fastapi import APIRouter, Request, Response

from event_aggregator.domain.errors import BackendUnavailable

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/healthz")
async def healthz(request: Request):
    try:
        await request.app.state.aggregator.ping()
        return {"status": "ok"}
    except BackendUnavailable as e:
        return Response(status_code=503, content=str(e))


@router.get("/readyz")
async def readyz(request: Request):
    aggregator = getattr(request.app.state, "aggregator", None)
    if aggregator is not None and aggregator.running:
        return {"status": "ready"}
    return Response(status_code=503, content="not ready")
