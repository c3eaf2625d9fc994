# pte_api/core/response.py
"""JSON envelope shared by every endpoint: ``{status, msg, data?, error_code?, details?}``."""
from typing import Any, Dict, Iterable, Literal, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pte_api.core.config import settings


class ErrorDetail(BaseModel):
    field: Optional[str] = None
    message: str
    code: Optional[str] = None


class ResponseModel(BaseModel):
    status: Literal["success", "error"]
    msg: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    details: Optional[list[ErrorDetail]] = None
    environment: Optional[str] = None


def _envelope(model: ResponseModel, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(model.model_dump(exclude_none=True)),
    )


def success_response(msg: str = "OK", data: Any = None, status_code: int = 200) -> JSONResponse:
    return _envelope(ResponseModel(status="success", msg=msg, data=data), status_code)


def error_response(
    msg: str,
    data: Any = None,
    status_code: int = 400,
    error_code: Optional[str] = None,
    details: Optional[list[ErrorDetail]] = None,
) -> JSONResponse:
    """Error envelope. ``error_code`` is the stable value clients branch on; ``msg`` is for people."""
    body = ResponseModel(
        status="error",
        msg=msg,
        data=data,
        error_code=error_code,
        details=details or None,
        environment=settings.ENVIRONMENT if settings.DEBUG and error_code else None,
    )
    return _envelope(body, status_code)


def _field_name(loc: Iterable[Any]) -> Optional[str]:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or None


def validation_error_response(errors: list[Dict[str, Any]], status_code: int = 422) -> JSONResponse:
    details = [
        ErrorDetail(
            field=_field_name(err.get("loc", ())),
            message=err.get("msg", "Validation error"),
            code=err.get("type", "VALIDATION_ERROR"),
        )
        for err in errors
    ]
    return error_response(
        msg="Invalid request parameters",
        status_code=status_code,
        error_code="VALIDATION_ERROR",
        details=details,
    )
