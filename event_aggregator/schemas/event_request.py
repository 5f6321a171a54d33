from datetime import datetime, timezone

from pydantic import BaseModel, Field
from uuid6 import uuid7

from event_aggregator.domain.models import Event


class EventIn(BaseModel):
    id: str | None = Field(None, description="Event id; UUID v7 generated if absent")
    type: str = Field(..., min_length=1, description="Event category")
    user_id: str = Field(..., min_length=1, description="The user identifier")
    value: float = Field(
        0.0, allow_inf_nan=False, description="Numeric magnitude of the event"
    )
    timestamp: datetime | None = Field(
        None, description="When the event occurred; ingestion time if absent"
    )

    def to_event(self) -> Event:
        return Event(
            id=self.id or str(uuid7()),
            type=self.type,
            user_id=self.user_id,
            value=self.value,
            timestamp=self.timestamp or datetime.now(timezone.utc),
        )


class EventAccepted(BaseModel):
    id: str
    status: str = "accepted"
