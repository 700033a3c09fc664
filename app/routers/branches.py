# app/routers/branches.py
"""
Occupancy endpoints.
GET  /branches        — current occupancy history per branch.
POST /branches/store  — runs one occupancy ingestion cycle against upstream.
"""

from fastapi import APIRouter, Depends, status

from app.config import settings
from app.dependencies import get_store, get_upstream_client
from app.services.branch_store import BranchStore, DataKind
from app.services.ingestion_service import run_ingestion_cycle
from app.services.query_service import get_current_state
from app.services.upstream_client import UpstreamClient
from app.utils.responses import PrettyJSONResponse, error_response

router = APIRouter()


@router.get("/branches", response_class=PrettyJSONResponse, summary="Occupancy readings per branch")
def get_all_branches(store: BranchStore = Depends(get_store)):
    return get_current_state(DataKind.OCCUPANCY, store)


async def store_branch_data(store: BranchStore = Depends(get_store),
                            upstream: UpstreamClient = Depends(get_upstream_client)):
    """
    Fetch current occupancy for every branch and append it to the store.
    Returns 500 with the per-branch errors if any branch failed;
    the branches that succeeded stay stored.
    """
    result = await run_ingestion_cycle(DataKind.OCCUPANCY, store, upstream)
    if not result.ok:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, result.to_envelope())
    return PrettyJSONResponse("Store Succeeded")


router.add_api_route("/branches/store", store_branch_data, methods=["POST"],
                     summary="Run an occupancy ingestion cycle")
if settings.LEGACY_GET_TRIGGERS:
    router.add_api_route("/branches/store", store_branch_data, methods=["GET"],
                         include_in_schema=False)
