"""Unit tests for timestamp and record normalization."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime, timedelta, timezone
from app.schemas.branch_data import ExpectedAttendanceSlot, OccupancyReading
from app.services.normalization import normalize_reading, normalize_slots, normalize_timestamp

BRISBANE = timezone(timedelta(hours=10))


class TestNormalizeTimestamp:
    def test_aware_converted_to_naive_utc(self):
        value = datetime(2021, 10, 5, 14, 0, tzinfo=BRISBANE)
        assert normalize_timestamp(value, 0) == datetime(2021, 10, 5, 4, 0)

    def test_offset_applied(self):
        value = datetime(2021, 10, 5, 4, 0, tzinfo=timezone.utc)
        assert normalize_timestamp(value, 10) == datetime(2021, 10, 5, 14, 0)

    def test_naive_taken_as_utc(self):
        assert normalize_timestamp(datetime(2021, 10, 5, 4, 0), 0) == datetime(2021, 10, 5, 4, 0)


class TestNormalizeRecords:
    def test_reading_keeps_values(self):
        reading = OccupancyReading(last_updated=datetime(2021, 10, 5, 14, 0, tzinfo=BRISBANE),
                                   name="Milton", status=" Busy ", current_percentage=80)
        normalized = normalize_reading(reading, 0)

        assert normalized.last_updated == datetime(2021, 10, 5, 4, 0)
        assert normalized.status == "Busy"
        assert normalized.current_percentage == 80
        assert reading.status == " Busy "

    def test_slots_sorted_by_hour(self):
        slots = [ExpectedAttendanceSlot(hour=h, percentage=1.0) for h in (9, 7, 8)]
        assert [s.hour for s in normalize_slots(slots)] == [7, 8, 9]
