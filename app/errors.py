# app/errors.py
"""
Exception hierarchy for the tracker.
Each error carries a stable `kind` used in the JSON error envelope.
"""

from typing import Optional


class GymTrackerError(Exception):
    """Base exception for all tracker errors."""

    kind = "internal"

    def __init__(self, message: str, *, branch: Optional[str] = None):
        self.branch = branch
        super().__init__(message)

    def to_envelope(self) -> dict:
        return {"kind": self.kind, "message": str(self)}


class ConfigurationError(GymTrackerError):
    """Missing or invalid configuration. Fatal at startup."""

    kind = "configuration"


class UpstreamFetchError(GymTrackerError):
    """Network failure, timeout or non-2xx response from the upstream API."""

    kind = "upstream_fetch"

    def __init__(self, message: str, *, branch: Optional[str] = None,
                 status_code: Optional[int] = None, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(message, branch=branch)


class UpstreamDecodeError(GymTrackerError):
    """Upstream body is not JSON or does not have the expected shape."""

    kind = "decode"


class PersistenceError(GymTrackerError):
    """Query or connection failure in the storage backend."""

    kind = "persistence"
