from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .models import Event, ensure_utc


@dataclass(frozen=True)
class EventFilter:
    """Query constraints shared by every storage backend.

    Empty ``user_id``/``event_type`` and ``None`` bounds mean "no constraint";
    time bounds are inclusive.
    """

    user_id: str = ""
    event_type: str = ""
    from_: Optional[datetime] = None
    to: Optional[datetime] = None

    def __post_init__(self):
        if self.from_ is not None:
            object.__setattr__(self, "from_", ensure_utc(self.from_))
        if self.to is not None:
            object.__setattr__(self, "to", ensure_utc(self.to))

    def matches_identity(self, event: Event) -> bool:
        return (not self.user_id or event.user_id == self.user_id) and (
            not self.event_type or event.type == self.event_type
        )

    def matches_time(self, event: Event) -> bool:
        if self.from_ is not None and event.timestamp < self.from_:
            return False
        if self.to is not None and event.timestamp > self.to:
            return False
        return True

    def matches(self, event: Event) -> bool:
        return self.matches_identity(event) and self.matches_time(event)
