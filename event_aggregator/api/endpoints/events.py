from fastapi import APIRouter, Depends, status

from event_aggregator.api.dependencies import get_aggregator
from event_aggregator.core.logger import get_logger
from event_aggregator.schemas.event_request import EventAccepted, EventIn
from event_aggregator.services.aggregator_service import AggregatorService

router = APIRouter()
logger = get_logger("api.events")


@router.post(
    "/events",
    status_code=status.HTTP_201_CREATED,
    response_model=EventAccepted,
    summary="Submit an event",
    response_description="Event accepted for processing",
)
async def post_event(
    payload: EventIn, svc: AggregatorService = Depends(get_aggregator)
):
    event = payload.to_event()
    await svc.submit(event)
    logger.debug(
        "event_accepted",
        extra={
            "event_id": event.id,
            "event_type": event.type,
            "user_id": event.user_id,
        },
    )
    return EventAccepted(id=event.id)
