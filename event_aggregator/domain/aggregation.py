from typing import Iterable, Optional

from .models import AggregatedData, Event


def aggregate(
    events: Iterable[Event], user_id: str, event_type: str
) -> Optional[AggregatedData]:
    """Summarise ``events`` in a single pass.

    The caller has already filtered ``events`` down to one logical group;
    ``user_id`` and ``event_type`` only label the result. Returns ``None`` for
    an empty input. Extremes use strict comparisons, so on ties the first
    event in iteration order wins.
    """
    it = iter(events)
    first = next(it, None)
    if first is None:
        return None

    count = 1
    total = first.value
    min_value = max_value = first.value
    start_time = end_time = first.timestamp

    for e in it:
        count += 1
        total += e.value
        if e.value < min_value:
            min_value = e.value
        if e.value > max_value:
            max_value = e.value
        if e.timestamp < start_time:
            start_time = e.timestamp
        if e.timestamp > end_time:
            end_time = e.timestamp

    # total / count can land a ulp outside [min, max]
    avg = min(max(total / count, min_value), max_value)

    return AggregatedData(
        user_id=user_id,
        event_type=event_type,
        count=count,
        total_value=total,
        avg_value=avg,
        min_value=min_value,
        max_value=max_value,
        start_time=start_time,
        end_time=end_time,
    )
