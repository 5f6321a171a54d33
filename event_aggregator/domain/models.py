from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC so comparisons never mix kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Event(BaseModel):
    """A single observation, immutable once created."""

    id: str
    type: str
    user_id: str
    value: float = 0.0
    timestamp: datetime

    # inf/nan must survive the JSON round-trip through Redis
    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class AggregatedData(BaseModel):
    """Summary over the events sharing one grouping key."""

    user_id: str
    event_type: str
    count: int
    total_value: float
    avg_value: float
    min_value: float
    max_value: float
    start_time: datetime
    end_time: datetime

    model_config = ConfigDict(frozen=True)
