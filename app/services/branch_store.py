# app/services/branch_store.py
"""
Storage backends for branch readings.

Both backends expose the same four operations:
  record(branch, reading)     append one occupancy reading
  replace_all(branch, slots)  supersede a branch's attendance forecast
  read_all(kind)              {branch name: [records]} for every branch
  clear(kind)                 drop every record of one kind

InMemoryBranchStore keeps everything in process behind one lock.
DatabaseBranchStore writes through SQLAlchemy; every statement is bound,
and each replace_all runs in its own transaction.
"""

import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.errors import PersistenceError
from app.models.branch_data import BranchDataRow
from app.models.expected_attendance import ExpectedAttendanceRow
from app.schemas.branch_data import ExpectedAttendanceSlot, OccupancyReading
from app.services.branch_registry import Branch, branch_for_storage_id, branch_names
from app.utils.logger import get_logger

logger = get_logger(__name__)


class DataKind(str, Enum):
    OCCUPANCY = "occupancy"
    ATTENDANCE = "attendance"


class BranchStore(ABC):
    backend = "abstract"

    @abstractmethod
    def record(self, branch: Branch, reading: OccupancyReading):
        ...

    @abstractmethod
    def replace_all(self, branch: Branch, slots: list[ExpectedAttendanceSlot]):
        ...

    @abstractmethod
    def read_all(self, kind: DataKind) -> dict[str, list]:
        ...

    @abstractmethod
    def clear(self, kind: DataKind):
        ...

    def ping(self) -> str:
        return "ok"

    def close(self):
        pass


class InMemoryBranchStore(BranchStore):
    """
    Process-local store. Occupancy grows by one reading per cycle; set
    history_limit to keep only the newest N per branch.
    """

    backend = "memory"

    def __init__(self, history_limit: Optional[int] = None):
        if history_limit is not None and history_limit < 1:
            raise ValueError(f"history_limit must be at least 1, got {history_limit}")
        self.history_limit = history_limit
        self._lock = threading.Lock()
        self._data = {
            DataKind.OCCUPANCY: {name: [] for name in branch_names()},
            DataKind.ATTENDANCE: {name: [] for name in branch_names()},
        }

    def record(self, branch: Branch, reading: OccupancyReading):
        with self._lock:
            readings = self._data[DataKind.OCCUPANCY][branch.branch_name]
            readings.append(reading)
            if self.history_limit is not None and len(readings) > self.history_limit:
                del readings[: len(readings) - self.history_limit]

    def replace_all(self, branch: Branch, slots: list[ExpectedAttendanceSlot]):
        with self._lock:
            self._data[DataKind.ATTENDANCE][branch.branch_name] = list(slots)

    def read_all(self, kind: DataKind) -> dict[str, list]:
        with self._lock:
            return {name: list(items) for name, items in self._data[kind].items()}

    def clear(self, kind: DataKind):
        with self._lock:
            self._data[kind] = {name: [] for name in branch_names()}


class DatabaseBranchStore(BranchStore):
    """Relational store. Holds no cache: every read scans the table."""

    backend = "database"

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def record(self, branch: Branch, reading: OccupancyReading):
        try:
            with self.session_factory() as db:
                db.add(BranchDataRow(
                    branch_id=branch.storage_id,
                    last_updated=reading.last_updated,
                    name=reading.name,
                    status=reading.status,
                    current_percentage=reading.current_percentage,
                ))
                db.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"{branch.branch_name}: failed to store occupancy: {e}",
                                   branch=branch.branch_name) from e

    def replace_all(self, branch: Branch, slots: list[ExpectedAttendanceSlot]):
        try:
            with self.session_factory() as db, db.begin():
                deleted = db.query(ExpectedAttendanceRow).filter(
                    ExpectedAttendanceRow.branch_id == branch.storage_id
                ).delete(synchronize_session=False)
                db.add_all([
                    ExpectedAttendanceRow(branch_id=branch.storage_id, hour=s.hour,
                                          percentage=s.percentage, remaining=s.remaining)
                    for s in slots
                ])
            logger.debug(f"[STORE] {branch.branch_name}: replaced {deleted} attendance rows with {len(slots)}")
        except SQLAlchemyError as e:
            raise PersistenceError(f"{branch.branch_name}: failed to replace attendance: {e}",
                                   branch=branch.branch_name) from e

    def read_all(self, kind: DataKind) -> dict[str, list]:
        model, schema = self._model_for(kind)
        grouped = {name: [] for name in branch_names()}
        try:
            with self.session_factory() as db:
                rows = db.query(model).order_by(model.id).all()
                for row in rows:
                    branch = branch_for_storage_id(row.branch_id)
                    if branch is None:
                        logger.warning(f"[STORE] {model.__tablename__} row {row.id} has unknown branch_id {row.branch_id}")
                        continue
                    grouped[branch.branch_name].append(schema.model_validate(row))
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to read {kind.value}: {e}") from e
        return grouped

    def clear(self, kind: DataKind):
        model, _ = self._model_for(kind)
        try:
            with self.session_factory() as db, db.begin():
                deleted = db.query(model).delete(synchronize_session=False)
            logger.info(f"[STORE] cleared {deleted} rows from {model.__tablename__}")
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to clear {kind.value}: {e}") from e

    def ping(self) -> str:
        try:
            with self.session_factory() as db:
                db.execute(text("SELECT 1"))
            return "ok"
        except SQLAlchemyError as e:
            return f"error: {e}"

    @staticmethod
    def _model_for(kind: DataKind):
        if kind == DataKind.OCCUPANCY:
            return BranchDataRow, OccupancyReading
        return ExpectedAttendanceRow, ExpectedAttendanceSlot


def build_store() -> BranchStore:
    """Pick the backend named by STORAGE_BACKEND."""
    if settings.uses_database:
        from app.database import SessionLocal, create_tables, get_engine
        create_tables(get_engine())
        return DatabaseBranchStore(SessionLocal)
    return InMemoryBranchStore(history_limit=settings.MEMORY_HISTORY_LIMIT)
