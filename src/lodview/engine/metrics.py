"""Query latency counters for the reduction engine."""

from dataclasses import asdict, dataclass, replace


@dataclass
class RenderMetrics:
    """Running counters updated after every reduction or viewport query.

    Times are in seconds. ``memory_usage`` is an estimate (bytes) of the
    reduced series currently held by the LOD cache.
    """
    last_query_time: float = 0.0
    average_query_time: float = 0.0
    total_queries: int = 0
    memory_usage: int = 0

    def record(self, query_time: float) -> None:
        """Fold one query duration into the running average."""
        self.total_queries += 1
        self.last_query_time = query_time
        self.average_query_time = (
            self.average_query_time * (self.total_queries - 1) + query_time
        ) / self.total_queries

    def reset(self) -> None:
        self.last_query_time = 0.0
        self.average_query_time = 0.0
        self.total_queries = 0
        self.memory_usage = 0

    def snapshot(self) -> "RenderMetrics":
        """Independent copy safe to hand to subscribers."""
        return replace(self)

    def as_dict(self) -> dict:
        return asdict(self)
