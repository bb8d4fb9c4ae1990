# pharmadesk/api/response.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def ok(
    data: Any = None,
    *,
    message: Optional[str] = None,
    status_code: int = 200,
) -> JSONResponse:
    """
    Standard success wrapper:
    {
      "success": true,
      "data": ...,
      "message": "..." (optional)
    }
    """
    payload: Dict[str, Any] = {"success": True, "data": data}
    if message is not None:
        payload["message"] = message
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def err(message: str = "Server error", *, status_code: int = 400) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})
