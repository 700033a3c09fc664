# app/services/branch_registry.py
"""
Fixed registry of the tracked Urban Climb branches.
Each branch maps to the GUID the upstream API expects and to the small
integer stored in the branch_id column. The set is closed: it cannot grow
at runtime.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class BranchInfo:
    name: str
    upstream_id: str
    storage_id: int


class Branch(Enum):
    WESTEND = BranchInfo("westend", "D969F1B2-0C9F-49A9-B2AC-D7775642F298", 0)
    MILTON = BranchInfo("milton", "690326F9-98CE-4249-BD91-53A0676A137B", 1)
    NEWSTEAD = BranchInfo("newstead", "A3010228-DFC6-4317-86C0-3839FFDF3FD0", 2)

    @property
    def branch_name(self) -> str:
        return self.value.name

    @property
    def upstream_id(self) -> str:
        return self.value.upstream_id

    @property
    def storage_id(self) -> int:
        return self.value.storage_id


_BY_NAME = {b.branch_name: b for b in Branch}
_BY_STORAGE_ID = {b.storage_id: b for b in Branch}


def list_branches() -> tuple[Branch, ...]:
    """All tracked branches. Callers must not rely on the order."""
    return tuple(Branch)


def branch_names() -> list[str]:
    return [b.branch_name for b in Branch]


def branch_for_name(name: str) -> Optional[Branch]:
    return _BY_NAME.get(name)


def branch_for_storage_id(storage_id: int) -> Optional[Branch]:
    return _BY_STORAGE_ID.get(storage_id)
