class AggregatorError(Exception):
    """Base class for errors surfaced by the aggregator core."""


class QueueTimeout(AggregatorError):
    """The ingestion queue stayed full for the whole enqueue window."""

    def __init__(self, timeout: float, capacity: int):
        super().__init__(
            f"ingestion queue full (capacity={capacity}) for {timeout:.2f}s"
        )
        self.timeout = timeout
        self.capacity = capacity


class BackendUnavailable(AggregatorError):
    """The storage backend could not be reached."""
