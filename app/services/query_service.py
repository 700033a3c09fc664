# app/services/query_service.py
"""Read side: current per-branch state, serialised for API consumers."""

from app.services.branch_store import BranchStore, DataKind


def serialize(records: list) -> list[dict]:
    return [r.model_dump(mode="json") for r in records]


def get_current_state(kind: DataKind, store: BranchStore) -> dict[str, list[dict]]:
    """
    {branch name: [records]} for every branch.
    The memory backend returns a copy of live state; the database backend
    rescans its table on each call.
    """
    return {name: serialize(records) for name, records in store.read_all(kind).items()}
