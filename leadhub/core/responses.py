from __future__ import annotations

from typing import Any, Generic, TypeVar

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.requests import Request

from leadhub.context import get_correlation_id


DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    success: bool = True
    message: str | None = None
    data: DataT | None = None


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int


def error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
) -> JSONResponse:
    correlation_id = get_correlation_id() or getattr(request.state, "correlation_id", None)
    payload = {
        "success": False,
        "message": message,
        "code": code,
        "details": jsonable_encoder(details),
        "correlation_id": correlation_id,
    }
    return JSONResponse(status_code=status_code, content=payload)
