"""Unit tests for the in-memory and database branch stores."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError
from app.errors import PersistenceError
from app.models.expected_attendance import ExpectedAttendanceRow
from app.schemas.branch_data import ExpectedAttendanceSlot, OccupancyReading
from app.services.branch_registry import Branch
from app.services.branch_store import DataKind, DatabaseBranchStore, InMemoryBranchStore


def make_reading(pct=42.5, status="Quiet"):
    return OccupancyReading(last_updated=datetime(2021, 10, 5, 4, 23, 11), name="West End",
                            status=status, current_percentage=pct)


def make_slots(base=10.0):
    return [ExpectedAttendanceSlot(hour=6 + i, percentage=base + i, remaining=100 - base - i)
            for i in range(16)]


class TestInMemoryBranchStore:
    def test_record_is_visible_for_that_branch_only(self):
        store = InMemoryBranchStore()
        store.record(Branch.WESTEND, make_reading())

        state = store.read_all(DataKind.OCCUPANCY)
        assert [r.model_dump() for r in state["westend"]] == [make_reading().model_dump()]
        assert state["milton"] == []
        assert state["newstead"] == []

    def test_record_appends(self):
        store = InMemoryBranchStore()
        store.record(Branch.MILTON, make_reading(10))
        store.record(Branch.MILTON, make_reading(20))

        assert [r.current_percentage for r in store.read_all(DataKind.OCCUPANCY)["milton"]] == [10, 20]

    def test_history_limit_keeps_newest(self):
        store = InMemoryBranchStore(history_limit=2)
        for pct in (10, 20, 30):
            store.record(Branch.MILTON, make_reading(pct))

        assert [r.current_percentage for r in store.read_all(DataKind.OCCUPANCY)["milton"]] == [20, 30]

    @pytest.mark.parametrize("limit", [0, -1])
    def test_history_limit_below_one_rejected(self, limit):
        with pytest.raises(ValueError):
            InMemoryBranchStore(history_limit=limit)

    def test_replace_all_supersedes(self):
        store = InMemoryBranchStore()
        store.replace_all(Branch.NEWSTEAD, make_slots(10))
        store.replace_all(Branch.NEWSTEAD, make_slots(50))

        slots = store.read_all(DataKind.ATTENDANCE)["newstead"]
        assert len(slots) == 16
        assert slots[0].percentage == 50

    def test_occupancy_and_attendance_do_not_mix(self):
        store = InMemoryBranchStore()
        store.record(Branch.WESTEND, make_reading())
        store.replace_all(Branch.WESTEND, make_slots())
        store.record(Branch.WESTEND, make_reading(50))

        assert len(store.read_all(DataKind.OCCUPANCY)["westend"]) == 2
        assert len(store.read_all(DataKind.ATTENDANCE)["westend"]) == 16

    def test_read_returns_copy(self):
        store = InMemoryBranchStore()
        store.record(Branch.WESTEND, make_reading())

        state = store.read_all(DataKind.OCCUPANCY)
        state["westend"].clear()
        assert len(store.read_all(DataKind.OCCUPANCY)["westend"]) == 1

    def test_clear(self):
        store = InMemoryBranchStore()
        store.replace_all(Branch.WESTEND, make_slots())
        store.clear(DataKind.ATTENDANCE)

        assert store.read_all(DataKind.ATTENDANCE) == {"westend": [], "milton": [], "newstead": []}


class TestDatabaseBranchStore:
    def test_record_and_read_back(self, session_factory):
        store = DatabaseBranchStore(session_factory)
        store.record(Branch.WESTEND, make_reading())

        state = store.read_all(DataKind.OCCUPANCY)
        assert [r.model_dump() for r in state["westend"]] == [make_reading().model_dump()]
        assert state["milton"] == [] and state["newstead"] == []

    def test_rows_grouped_by_branch_id(self, session_factory):
        store = DatabaseBranchStore(session_factory)
        store.record(Branch.MILTON, make_reading(11))
        store.record(Branch.NEWSTEAD, make_reading(22))
        store.record(Branch.MILTON, make_reading(33))

        state = store.read_all(DataKind.OCCUPANCY)
        assert [r.current_percentage for r in state["milton"]] == [11, 33]
        assert [r.current_percentage for r in state["newstead"]] == [22]

    def test_replace_all_twice_leaves_only_second_payload(self, session_factory):
        store = DatabaseBranchStore(session_factory)
        store.replace_all(Branch.WESTEND, make_slots(10))
        store.replace_all(Branch.WESTEND, make_slots(50))

        slots = store.read_all(DataKind.ATTENDANCE)["westend"]
        assert [(s.hour, s.percentage) for s in slots] == [(s.hour, s.percentage) for s in make_slots(50)]
        with session_factory() as db:
            assert db.query(ExpectedAttendanceRow).count() == 16

    def test_replace_all_is_scoped_to_branch(self, session_factory):
        store = DatabaseBranchStore(session_factory)
        store.replace_all(Branch.WESTEND, make_slots(10))
        store.replace_all(Branch.MILTON, make_slots(20))
        store.replace_all(Branch.WESTEND, make_slots(30))

        state = store.read_all(DataKind.ATTENDANCE)
        assert state["milton"][0].percentage == 20
        assert state["westend"][0].percentage == 30

    def test_clear_removes_every_branch(self, session_factory):
        store = DatabaseBranchStore(session_factory)
        store.replace_all(Branch.WESTEND, make_slots())
        store.replace_all(Branch.MILTON, make_slots())
        store.clear(DataKind.ATTENDANCE)

        assert all(v == [] for v in store.read_all(DataKind.ATTENDANCE).values())

    def test_unknown_branch_id_rows_skipped(self, session_factory):
        with session_factory() as db:
            db.add(ExpectedAttendanceRow(branch_id=7, hour=6, percentage=1.0))
            db.commit()

        state = DatabaseBranchStore(session_factory).read_all(DataKind.ATTENDANCE)
        assert state == {"westend": [], "milton": [], "newstead": []}

    def test_ping(self, session_factory):
        assert DatabaseBranchStore(session_factory).ping() == "ok"

    def test_db_error_becomes_persistence_error(self):
        session = MagicMock()
        session.__enter__.return_value = session
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("gone away"))
        store = DatabaseBranchStore(MagicMock(return_value=session))

        with pytest.raises(PersistenceError) as exc:
            store.record(Branch.WESTEND, make_reading())
        assert exc.value.kind == "persistence"
        assert exc.value.branch == "westend"
