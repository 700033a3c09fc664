"""Shared fixtures: environment, upstream mocks and a SQLite-backed session factory."""

import os
import sys

os.environ.setdefault("GOOGLE_CLOUD_PROJECT", "test-project")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("STORAGE_BACKEND", "memory")
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.database import create_tables
from app.services.branch_registry import Branch
from app.services.upstream_client import UpstreamClient

OCCUPANCY_URL = "https://upstream.test/occupancy?branch="
ATTENDANCE_URL = "https://upstream.test/trendline?branch="

_BY_UPSTREAM_ID = {b.upstream_id: b for b in Branch}


def occupancy_payload(name="West End", status="Quiet", pct=42.5,
                      last_updated="2021-10-05T14:23:11+10:00"):
    return {"LastUpdated": last_updated, "Name": name, "Status": status, "CurrentPercentage": pct}


def attendance_payload(base=10.0, count=16):
    return [{"hour": 6 + i, "percantage": base + i, "remaining": 100 - (base + i)} for i in range(count)]


def branch_of(request: httpx.Request) -> Branch:
    return _BY_UPSTREAM_ID[request.url.params["branch"]]


def make_upstream(handler) -> UpstreamClient:
    """UpstreamClient whose requests are answered by handler(request) -> httpx.Response."""
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return UpstreamClient(http, occupancy_url=OCCUPANCY_URL, attendance_url=ATTENDANCE_URL,
                          timeout=1, slot_count=16)


def routed_handler(occupancy=None, attendance=None):
    """
    Handler serving per-branch responses. `occupancy`/`attendance` map a branch
    to a payload, an httpx.Response, or an exception instance to raise.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        branch = branch_of(request)
        table = occupancy if "occupancy" in request.url.path else attendance
        outcome = (table or {}).get(branch)
        if outcome is None:
            return httpx.Response(404)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, httpx.Response):
            return outcome
        return httpx.Response(200, json=outcome)
    return handler


@pytest.fixture
def session_factory(tmp_path):
    # File-backed so store calls from worker threads each get their own connection
    engine = create_engine(f"sqlite:///{tmp_path / 'tracker.db'}",
                           connect_args={"check_same_thread": False, "timeout": 15})
    create_tables(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
