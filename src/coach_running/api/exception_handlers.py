"""
Exception handlers for the FastAPI application.

Every failure leaves the API in one envelope:

    {"error": {"code": <ErrorCode>, "message": str, "details": {...}}}

details is omitted when there is nothing to add. Engine errors carry
their own status; request validation is 422; anything else is a logged
500 that names the failing path but never the exception text.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import CoachRunningError, ErrorCode


logger = logging.getLogger("coach_running.api")

# Request parts FastAPI prefixes to validation locations
REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie")


def error_body(
    code: ErrorCode,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """The error envelope for code, message and optional details."""
    error: Dict[str, Any] = {"code": code.value, "message": message}
    if details:
        error["details"] = details
    return {"error": error}


def error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(code, message, details))


def describe_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Flatten pydantic error entries.

    ("body", "report", "avg_rpe") becomes field "report.avg_rpe" with
    location "body"; model errors raised outside a request keep their
    full path and have no location.
    """
    described = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        location = loc.pop(0) if loc and loc[0] in REQUEST_LOCATIONS else None
        entry = {
            "field": ".".join(loc) or (location or ""),
            "message": error["msg"],
            "type": error["type"],
        }
        if location:
            entry["location"] = location
        described.append(entry)
    return described


async def coach_running_error_handler(request: Request, exc: CoachRunningError) -> JSONResponse:
    """Engine errors map to their own status and code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code} {exc!r}")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code.value}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(
    request: Request,
    exc: Union[RequestValidationError, PydanticValidationError],
) -> JSONResponse:
    errors = describe_validation_errors(exc.errors())
    return error_response(
        422,
        ErrorCode.VALIDATION_ERROR,
        f"{len(errors)} invalid field(s) in request",
        {"errors": errors},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
    )
    return error_response(
        500,
        ErrorCode.INTERNAL_ERROR,
        "An unexpected error occurred",
        {"path": request.url.path},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope handlers on app."""
    app.add_exception_handler(CoachRunningError, coach_running_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PydanticValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
