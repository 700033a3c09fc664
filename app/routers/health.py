# app/routers/health.py
"""
Liveness and health endpoints.
GET /       — service info.
GET /health — backend status + storage connectivity.
"""

from fastapi import APIRouter, Depends, Request
from datetime import datetime, timezone

from app.dependencies import get_store
from app.services.branch_registry import branch_names
from app.services.branch_store import BranchStore

router = APIRouter()


@router.get("/", summary="Service info")
def root(request: Request):
    return {
        "service": request.app.title,
        "version": request.app.version,
        "project_id": request.app.state.project_id,
        "storage_backend": request.app.state.store.backend,
        "branches": branch_names(),
    }


@router.get("/health", summary="System health check")
def health_check(store: BranchStore = Depends(get_store)):
    """
    Returns:
    - Backend status
    - Storage connectivity (SELECT 1 on the database backend)
    """
    result = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "backend": "ok",
        "storage": store.ping(),
    }
    if result["storage"] != "ok":
        result["status"] = "degraded"
    return result
