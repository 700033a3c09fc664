# app/routers/attendance.py
"""Expected attendance endpoints — stored forecast, daily refresh, and an unstored preview."""

from fastapi import APIRouter, Depends, status

from app.config import settings
from app.dependencies import get_store, get_upstream_client
from app.services.branch_store import BranchStore, DataKind
from app.services.ingestion_service import preview_attendance, run_ingestion_cycle
from app.services.query_service import get_current_state, serialize
from app.services.upstream_client import UpstreamClient
from app.utils.responses import PrettyJSONResponse, error_response

router = APIRouter()


@router.get("/attendance", response_class=PrettyJSONResponse, summary="Stored expected attendance per branch")
def get_attendance(store: BranchStore = Depends(get_store)):
    return get_current_state(DataKind.ATTENDANCE, store)


@router.get("/test/attendance", response_class=PrettyJSONResponse,
            summary="Fetch expected attendance from upstream without storing it")
async def test_attendance(upstream: UpstreamClient = Depends(get_upstream_client)):
    slots, failures = await preview_attendance(upstream)
    if failures:
        return error_response(status.HTTP_502_BAD_GATEWAY, {
            "kind": "upstream",
            "message": f"attendance preview failed for {len(failures)} branch(es)",
            "errors": [f.to_dict() for f in failures],
        })
    return {name: serialize(items) for name, items in slots.items()}


async def store_attendance(store: BranchStore = Depends(get_store),
                           upstream: UpstreamClient = Depends(get_upstream_client)):
    """Refresh the 16-slot forecast for every branch. Meant to run once per day."""
    result = await run_ingestion_cycle(DataKind.ATTENDANCE, store, upstream)
    if not result.ok:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, result.to_envelope())
    return PrettyJSONResponse("Store Succeeded")


router.add_api_route("/attendance/store", store_attendance, methods=["POST"],
                     summary="Run an expected attendance ingestion cycle")
if settings.LEGACY_GET_TRIGGERS:
    router.add_api_route("/attendance/store", store_attendance, methods=["GET"],
                         include_in_schema=False)
