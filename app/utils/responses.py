# app/utils/responses.py
"""Response helpers shared by the routers."""

import json
from typing import Any

from fastapi.responses import JSONResponse


class PrettyJSONResponse(JSONResponse):
    """JSONResponse rendered with indentation, for humans reading the API in a browser."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=4).encode("utf-8")


def error_response(status_code: int, envelope: dict) -> PrettyJSONResponse:
    return PrettyJSONResponse(status_code=status_code, content=envelope)
