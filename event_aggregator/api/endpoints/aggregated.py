from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.exceptions import RequestValidationError
from pydantic import TypeAdapter, ValidationError

from event_aggregator.api.dependencies import get_aggregator
from event_aggregator.domain.models import AggregatedData
from event_aggregator.services.aggregator_service import AggregatorService

router = APIRouter(prefix="/aggregated")

_datetime = TypeAdapter(datetime)


def _time_bound(name: str, raw: Optional[str]) -> Optional[datetime]:
    # "?from=" is treated the same as leaving the bound out
    if not raw:
        return None
    try:
        return _datetime.validate_python(raw)
    except ValidationError as exc:
        raise RequestValidationError(
            [{**err, "loc": ("query", name)} for err in exc.errors()]
        ) from exc


@router.get("")
async def get_aggregated(
    user_id: str = "",
    event_type: str = Query("", alias="type"),
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = None,
    svc: AggregatorService = Depends(get_aggregator),
):
    data = await svc.query(
        user_id, event_type, _time_bound("from", from_), _time_bound("to", to)
    )
    if data is None:
        return {"message": "no data found"}
    return data


@router.get("/all", response_model=list[AggregatedData])
async def get_all_aggregated(svc: AggregatorService = Depends(get_aggregator)):
    return await svc.query_all()
