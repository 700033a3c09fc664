# app/utils/gcp.py
"""
Google Cloud project detection.
GOOGLE_CLOUD_PROJECT wins; otherwise ask the metadata server, which only
answers inside GCP (Cloud Run, GCE, GKE).
"""

from typing import Optional

import requests

from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

METADATA_PROJECT_URL = "http://metadata.google.internal/computeMetadata/v1/project/project-id"


def resolve_project_id(timeout: float = 2) -> Optional[str]:
    """Returns the project id, or None when it cannot be determined."""
    if settings.GOOGLE_CLOUD_PROJECT:
        return settings.GOOGLE_CLOUD_PROJECT

    try:
        resp = requests.get(METADATA_PROJECT_URL, headers={"Metadata-Flavor": "Google"}, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.warning(f"Project ID not in GOOGLE_CLOUD_PROJECT and metadata server unreachable: {e}")
        return None

    if resp.status_code != 200 or not resp.text.strip():
        logger.warning(f"Metadata server returned HTTP {resp.status_code} for project id")
        return None
    return resp.text.strip()
