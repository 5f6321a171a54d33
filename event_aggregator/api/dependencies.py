from fastapi import Request

from event_aggregator.services.aggregator_service import AggregatorService


def get_aggregator(request: Request) -> AggregatorService:
    return request.app.state.aggregator  # type: ignore[no-any-return]
