# app/dependencies.py
"""FastAPI dependencies for the shared store and upstream client (built in the lifespan)."""

from fastapi import Request

from app.services.branch_store import BranchStore
from app.services.upstream_client import UpstreamClient


def get_store(request: Request) -> BranchStore:
    return request.app.state.store


def get_upstream_client(request: Request) -> UpstreamClient:
    return request.app.state.upstream
