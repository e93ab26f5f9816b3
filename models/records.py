"""Request-scoped value objects shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(slots=True)
class HistoryQuery:
    """A validated history request: which city and which time window."""

    period: str
    duration: timedelta
    city: str
    start: datetime
    end: datetime


@dataclass(slots=True)
class ObjectDescriptor:
    """Listing entry for an archived object."""

    key: str
    size: int
    last_modified: datetime | None = None
