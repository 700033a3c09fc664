# app/services/upstream_client.py
"""
Upstream client — pulls occupancy and expected attendance from Urban Climb.

Occupancy:  GET {OCCUPANCY_URL}{branch GUID}   -> single JSON object
Attendance: GET {ATTENDANCE_URL}{branch GUID}  -> JSON array of 16 hourly slots

Failures raise UpstreamFetchError (network, timeout, non-2xx) or
UpstreamDecodeError (bad JSON, unexpected shape). Nothing is retried.
"""

import json
from typing import Optional

import httpx
from pydantic import ValidationError

from app.config import settings
from app.errors import UpstreamDecodeError, UpstreamFetchError
from app.schemas.branch_data import ExpectedAttendanceSlot, OccupancyReading
from app.services.branch_registry import Branch
from app.utils.logger import get_logger

logger = get_logger(__name__)


class UpstreamClient:
    """Thin wrapper over a shared httpx.AsyncClient with per-call timeouts."""

    def __init__(self, http: httpx.AsyncClient, occupancy_url: Optional[str] = None,
                 attendance_url: Optional[str] = None, timeout: Optional[float] = None,
                 slot_count: Optional[int] = None):
        self.http = http
        self.occupancy_url = occupancy_url or settings.OCCUPANCY_URL
        self.attendance_url = attendance_url or settings.ATTENDANCE_URL
        self.timeout = timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECONDS
        self.slot_count = slot_count if slot_count is not None else settings.ATTENDANCE_SLOT_COUNT

    async def fetch_occupancy(self, branch: Branch) -> OccupancyReading:
        url = f"{self.occupancy_url}{branch.upstream_id}"
        payload = await self._get_json(url, branch)
        if not isinstance(payload, dict):
            raise UpstreamDecodeError(
                f"{branch.branch_name}: expected a JSON object, got {type(payload).__name__}",
                branch=branch.branch_name,
            )
        try:
            reading = OccupancyReading.model_validate(payload)
        except ValidationError as e:
            raise UpstreamDecodeError(
                f"{branch.branch_name}: unexpected occupancy shape: {e.error_count()} error(s)",
                branch=branch.branch_name,
            ) from e

        logger.info(f"[UPSTREAM] {branch.branch_name}: {reading.current_percentage}% ({reading.status})")
        return reading

    async def fetch_expected_attendance(self, branch: Branch) -> list[ExpectedAttendanceSlot]:
        url = f"{self.attendance_url}{branch.upstream_id}"
        payload = await self._get_json(url, branch)
        if not isinstance(payload, list):
            raise UpstreamDecodeError(
                f"{branch.branch_name}: expected a JSON array, got {type(payload).__name__}",
                branch=branch.branch_name,
            )
        if len(payload) != self.slot_count:
            raise UpstreamDecodeError(
                f"{branch.branch_name}: expected {self.slot_count} attendance slots, got {len(payload)}",
                branch=branch.branch_name,
            )
        try:
            slots = [ExpectedAttendanceSlot.model_validate(item) for item in payload]
        except ValidationError as e:
            raise UpstreamDecodeError(
                f"{branch.branch_name}: unexpected attendance slot shape: {e.error_count()} error(s)",
                branch=branch.branch_name,
            ) from e

        logger.info(f"[UPSTREAM] {branch.branch_name}: {len(slots)} attendance slots")
        return slots

    async def _get_json(self, url: str, branch: Branch):
        try:
            response = await self.http.get(url, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise UpstreamFetchError(
                f"{branch.branch_name}: upstream timed out after {self.timeout}s",
                branch=branch.branch_name, url=url,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamFetchError(
                f"{branch.branch_name}: upstream request failed: {e}",
                branch=branch.branch_name, url=url,
            ) from e

        if not response.is_success:
            raise UpstreamFetchError(
                f"{branch.branch_name}: upstream returned HTTP {response.status_code}",
                branch=branch.branch_name, status_code=response.status_code, url=url,
            )

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise UpstreamDecodeError(
                f"{branch.branch_name}: upstream body is not valid JSON",
                branch=branch.branch_name,
            ) from e
