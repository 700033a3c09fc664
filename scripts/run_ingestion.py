"""
Run one ingestion cycle outside the HTTP server (cron / Cloud Scheduler job).
Usage: python scripts/run_ingestion.py occupancy
       python scripts/run_ingestion.py attendance
Exit code 1 if any branch failed.
"""

import argparse
import asyncio
import json
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
from app.config import settings
from app.database import dispose_engine
from app.services.branch_store import DataKind, build_store
from app.services.ingestion_service import run_ingestion_cycle
from app.services.query_service import get_current_state
from app.services.upstream_client import UpstreamClient


async def run(kind: DataKind, show: bool) -> bool:
    settings.validate_startup()
    store = build_store()
    try:
        async with httpx.AsyncClient(timeout=settings.UPSTREAM_TIMEOUT_SECONDS) as http:
            result = await run_ingestion_cycle(kind, store, UpstreamClient(http))
        if result.ok:
            print(f"✅ {kind.value}: stored {', '.join(sorted(result.succeeded))}")
        else:
            print(json.dumps(result.to_envelope(), indent=2))
        if show:
            print(json.dumps(get_current_state(kind, store), indent=2))
        return result.ok
    finally:
        store.close()
        dispose_engine()


def main():
    parser = argparse.ArgumentParser(description="Run one ingestion cycle")
    parser.add_argument("kind", choices=[k.value for k in DataKind])
    parser.add_argument("--show", action="store_true", help="Print stored state afterwards")
    args = parser.parse_args()
    ok = asyncio.run(run(DataKind(args.kind), args.show))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
