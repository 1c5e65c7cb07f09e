"""
Shared API error handlers for the DuokeyError contract and 422 validation payloads.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from duokey.platform.errors import DuokeyError

log = logging.getLogger(__name__)

_STATUS_BY_CODE: Mapping[str, int] = {
    "validation_error": 422,
    "invalid_request": 400,
    "unauthorized": 401,
    "not_found": 404,
    "conflict": 409,
    "internal_error": 500,
}


def register_api_error_handlers(*, app: FastAPI) -> None:
    """
    Install handlers for `DuokeyError` and FastAPI request validation errors.

    Args:
        app: FastAPI application instance.
    Returns:
        None.
    Assumptions:
        Called once while building the application.
    Raises:
        ValueError: If `app` is missing.
    Side Effects:
        Mutates FastAPI exception-handler registry.
    """
    if app is None:  # type: ignore[truthy-bool]
        raise ValueError("register_api_error_handlers requires app")

    app.add_exception_handler(DuokeyError, duokey_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)


def duokey_error_handler(_request: Request, error: Exception) -> JSONResponse:
    duokey_error = cast(DuokeyError, error)
    status_code = _STATUS_BY_CODE.get(duokey_error.code, 500)
    if status_code >= 500:
        log.error("unhandled platform error code=%s", duokey_error.code)
    return JSONResponse(status_code=status_code, content=duokey_error.to_payload())


def request_validation_error_handler(_request: Request, error: Exception) -> JSONResponse:
    """
    Convert request validation failures into a `validation_error` payload.

    Args:
        _request: Starlette request object (unused).
        error: Raised `RequestValidationError`.
    Returns:
        JSONResponse: HTTP 422 with `details.errors` sorted by path, code, and message.
    Assumptions:
        Pydantic errors expose `loc`, `type`, and `msg`.
    Raises:
        None.
    Side Effects:
        None.
    """
    validation_error = cast(RequestValidationError, error)
    duokey_error = DuokeyError(
        code="validation_error",
        message="Validation failed",
        details={"errors": _validation_items(raw_errors=validation_error.errors())},
    )
    return duokey_error_handler(_request, duokey_error)


def _validation_items(*, raw_errors: Any) -> list[dict[str, str]]:
    if not isinstance(raw_errors, Sequence) or isinstance(raw_errors, (str, bytes)):
        return []
    items: list[dict[str, str]] = []
    for raw_error in raw_errors:
        if not isinstance(raw_error, Mapping):
            items.append({"path": "unknown", "code": "validation_error", "message": str(raw_error)})
            continue
        items.append(
            {
                "path": _error_path(loc=raw_error.get("loc")),
                "code": _error_code(raw_type=raw_error.get("type")),
                "message": str(raw_error.get("msg", "Validation error")),
            }
        )
    return sorted(items, key=lambda item: (item["path"], item["code"], item["message"]))


def _error_path(*, loc: Any) -> str:
    if isinstance(loc, Sequence) and not isinstance(loc, (str, bytes)) and loc:
        return ".".join(str(part) for part in loc)
    if loc is None:
        return "unknown"
    return str(loc)


def _error_code(*, raw_type: Any) -> str:
    normalized = str(raw_type or "").strip().lower()
    if not normalized:
        return "validation_error"
    # pydantic reports absent required fields as `missing`
    if normalized == "missing" or normalized.endswith(".missing"):
        return "required"
    return normalized
