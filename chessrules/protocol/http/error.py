from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Type, cast

from fastapi import HTTPException as FastAPIHTTPException
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from .session import UnknownPositionError
from ...engine.errors import (
    EmptyHistoryError,
    EngineError,
    FenError,
    IllegalMoveError,
    InvalidMoveError,
    MissingKingError,
    NotationError,
    PositionError,
)


logger = logging.getLogger(__name__)

# Most specific first: MissingKingError is a PositionError.
ENGINE_ERROR_CODES: Tuple[Tuple[Type[EngineError], str], ...] = (
    (FenError, "invalid_fen"),
    (NotationError, "invalid_notation"),
    (IllegalMoveError, "illegal_move"),
    (InvalidMoveError, "invalid_move"),
    (MissingKingError, "missing_king"),
    (PositionError, "invalid_position"),
    (EmptyHistoryError, "empty_history"),
)

_UNPROCESSABLE = 422


def error_envelope(
    *,
    code: str,
    message: str,
    err_type: str,
    request_id: str,
    field_errors: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "type": err_type,
            "request_id": request_id,
        }
    }
    if field_errors:
        payload["error"]["field_errors"] = field_errors
    return payload


def _render(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    field_errors: Optional[List[Dict[str, str]]] = None,
) -> JSONResponse:
    payload = error_envelope(
        code=code,
        message=message,
        err_type="client_error" if 400 <= status_code < 500 else "server_error",
        request_id=getattr(request.state, "request_id", ""),
        field_errors=field_errors,
    )
    return JSONResponse(status_code=status_code, content=payload)


def engine_error_code(exc: EngineError) -> str:
    for kind, code in ENGINE_ERROR_CODES:
        if isinstance(exc, kind):
            return code
    return "bad_request"


async def engine_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render rules-engine failures as 400 with a code naming the failure."""
    err = cast(EngineError, exc)
    code = engine_error_code(err)
    logger.info(
        "engine error",
        extra={"request_id": getattr(request.state, "request_id", ""), "code": code},
    )
    return _render(request, status.HTTP_400_BAD_REQUEST, code, str(err))


async def unknown_position_handler(request: Request, exc: Exception) -> JSONResponse:
    err = cast(UnknownPositionError, exc)
    return _render(request, status.HTTP_404_NOT_FOUND, "not_found", str(err))


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, FastAPIHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _render(request, exc.status_code, _status_to_code(exc.status_code), message)
    return await exception_handler(request, exc)


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, FastAPIHTTPException):
        return await http_exception_handler(request, exc)
    logger.exception(
        "Unhandled exception",
        extra={"request_id": getattr(request.state, "request_id", "")},
    )
    return _render(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "Internal Server Error",
    )


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    errors = []
    rve = cast(RequestValidationError, exc)
    for e in rve.errors():
        loc = ".".join(str(p) for p in e.get("loc", []) if p is not None)
        errors.append(
            {
                "field": loc,
                "code": e.get("type", "value_error"),
                "message": e.get("msg", "invalid value"),
            }
        )
    return _render(
        request,
        _UNPROCESSABLE,
        "unprocessable_entity",
        "Validation error",
        field_errors=errors or None,
    )


def _status_to_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "bad_request"
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return "method_not_allowed"
    if status_code == _UNPROCESSABLE:
        return "unprocessable_entity"
    if 500 <= status_code < 600:
        return "internal_error"
    return "error"
