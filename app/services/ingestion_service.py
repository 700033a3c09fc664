# app/services/ingestion_service.py
"""
Ingestion cycle: one pass over every branch for one kind of data.

Occupancy:  fetch -> normalize -> store.record        (appends history)
Attendance: fetch -> normalize -> store.replace_all   (supersedes forecast)

Branches run concurrently and fail independently. A failed branch is
logged, collected in the result and leaves its stored data untouched;
successful branches are never rolled back. The cycle as a whole runs under
INGESTION_DEADLINE_SECONDS; branches still running at the deadline are
cancelled and reported as timeouts. Store calls run in worker threads so a
slow database never blocks the event loop. Cancelling the cycle cancels
every branch task before the cancellation propagates.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, Optional

from app.config import settings
from app.errors import GymTrackerError
from app.services.branch_registry import Branch, list_branches
from app.services.branch_store import BranchStore, DataKind
from app.services.normalization import normalize_reading, normalize_slots
from app.services.upstream_client import UpstreamClient
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class BranchFailure:
    branch: str
    kind: str          # upstream_fetch | decode | persistence | timeout | internal
    message: str

    def to_dict(self) -> dict:
        return {"branch": self.branch, "kind": self.kind, "message": self.message}


@dataclass
class IngestionResult:
    kind: DataKind
    succeeded: list[str] = field(default_factory=list)
    failures: list[BranchFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_envelope(self) -> dict:
        """Error envelope for a failed cycle."""
        return {
            "kind": "ingestion_failed",
            "message": f"{self.kind.value} ingestion failed for {len(self.failures)} branch(es)",
            "succeeded": sorted(self.succeeded),
            "errors": [f.to_dict() for f in self.failures],
        }


async def _ingest_branch(kind: DataKind, branch: Branch, store: BranchStore,
                         upstream: UpstreamClient):
    if kind == DataKind.OCCUPANCY:
        reading = await upstream.fetch_occupancy(branch)
        await asyncio.to_thread(store.record, branch, normalize_reading(reading))
    else:
        slots = await upstream.fetch_expected_attendance(branch)
        await asyncio.to_thread(store.replace_all, branch, normalize_slots(slots))


async def run_ingestion_cycle(kind: DataKind, store: BranchStore, upstream: UpstreamClient,
                              branches: Optional[Iterable[Branch]] = None,
                              deadline: Optional[float] = None) -> IngestionResult:
    """Fetch and store `kind` for every branch. Never raises for per-branch failures."""
    branches = tuple(branches) if branches is not None else list_branches()
    deadline = deadline if deadline is not None else settings.INGESTION_DEADLINE_SECONDS
    result = IngestionResult(kind=kind)

    if kind == DataKind.ATTENDANCE and settings.ATTENDANCE_REFRESH_SCOPE.lower() == "all":
        # Full daily refresh: the whole table goes before any branch is refilled
        try:
            await asyncio.to_thread(store.clear, DataKind.ATTENDANCE)
        except GymTrackerError as e:
            logger.error(f"[INGEST] attendance clear failed: {e}")
            result.failures.extend(BranchFailure(b.branch_name, e.kind, str(e)) for b in branches)
            return result

    logger.info(f"[INGEST] {kind.value} cycle starting for {len(branches)} branches")
    tasks = {
        asyncio.create_task(_ingest_branch(kind, b, store, upstream), name=f"ingest-{kind.value}-{b.branch_name}"): b
        for b in branches
    }
    try:
        _, pending = await asyncio.wait(set(tasks), timeout=deadline) if tasks else (set(), set())
    except asyncio.CancelledError:
        # Caller gave up: no branch may keep fetching or writing after this
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.warning(f"[INGEST] {kind.value} cycle cancelled")
        raise

    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    for task, branch in tasks.items():
        name = branch.branch_name
        if task in pending:
            logger.error(f"[INGEST] {name}: {kind.value} not finished within {deadline}s")
            result.failures.append(BranchFailure(name, "timeout", f"{name}: not finished within {deadline}s"))
            continue
        exc = task.exception()
        if exc is None:
            result.succeeded.append(name)
        elif isinstance(exc, GymTrackerError):
            logger.error(f"[INGEST] {name}: {exc}")
            result.failures.append(BranchFailure(name, exc.kind, str(exc)))
        else:
            logger.error(f"[INGEST] {name}: unexpected error: {exc}", exc_info=exc)
            result.failures.append(BranchFailure(name, "internal", f"{name}: {exc}"))

    logger.info(f"[INGEST] {kind.value} cycle done: {len(result.succeeded)} ok, {len(result.failures)} failed")
    return result


async def preview_attendance(upstream: UpstreamClient,
                             branches: Optional[Iterable[Branch]] = None) -> tuple[dict, list[BranchFailure]]:
    """Fetch attendance for every branch without storing it."""
    branches = tuple(branches) if branches is not None else list_branches()
    outcomes = await asyncio.gather(
        *(upstream.fetch_expected_attendance(b) for b in branches), return_exceptions=True
    )
    slots, failures = {}, []
    for branch, outcome in zip(branches, outcomes):
        if isinstance(outcome, GymTrackerError):
            failures.append(BranchFailure(branch.branch_name, outcome.kind, str(outcome)))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            slots[branch.branch_name] = normalize_slots(outcome)
    return slots, failures
