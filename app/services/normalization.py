# app/services/normalization.py
"""
Reshapes upstream records into the form the stores keep.

Upstream LastUpdated values are converted to naive UTC and then shifted by
TIMESTAMP_OFFSET_HOURS. The Brisbane deployment stored local time with +10;
the default of 0 stores UTC. This is the only place the offset is applied.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from app.config import settings
from app.schemas.branch_data import ExpectedAttendanceSlot, OccupancyReading


def normalize_timestamp(value: datetime, offset_hours: Optional[float] = None) -> datetime:
    """Naive UTC (aware values are converted, naive ones taken as UTC) plus the offset."""
    if offset_hours is None:
        offset_hours = settings.TIMESTAMP_OFFSET_HOURS
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value + timedelta(hours=offset_hours)


def normalize_reading(reading: OccupancyReading, offset_hours: Optional[float] = None) -> OccupancyReading:
    return reading.model_copy(update={
        "last_updated": normalize_timestamp(reading.last_updated, offset_hours),
        "status": reading.status.strip(),
    })


def normalize_slots(slots: list[ExpectedAttendanceSlot]) -> list[ExpectedAttendanceSlot]:
    """Order slots by hour so every store returns them the same way."""
    return sorted(slots, key=lambda s: s.hour)
