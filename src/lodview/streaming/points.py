"""Timestamped stream values."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TimeSeriesPoint:
    """A value with its (UTC) timestamp and a unique id."""
    value: Any
    timestamp: datetime = field(default_factory=_utc_now)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
