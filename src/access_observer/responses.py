"""Standardized error responses for the error logging middleware."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response


def error_response(
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
    docs_url: str | None = None,
) -> dict[str, Any]:
    """Build a standardized error response dict."""
    err: dict[str, Any] = {"code": code, "message": message}
    if details:
        err["details"] = details
    if docs_url:
        err["docs_url"] = docs_url
    return {"error": err}


def default_error_handler(request: Request, exc: Exception) -> Response:
    """Answer HTTP errors with their own status and anything else with 500."""
    if isinstance(exc, HTTPException):
        try:
            code = HTTPStatus(exc.status_code).name
        except ValueError:
            code = "HTTP_ERROR"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(code, str(exc.detail)),
            headers=exc.headers,
        )
    return JSONResponse(
        status_code=500,
        content=error_response("INTERNAL_SERVER_ERROR", "Internal Server Error"),
    )
