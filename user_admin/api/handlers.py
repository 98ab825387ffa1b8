"""CORS envelope and JSON error mapping shared by every endpoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import UserAdminError

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def user_admin_error_handler(request: Request, exc: UserAdminError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.message, exc.status_code)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(str(exc.detail), exc.status_code)


async def cors_envelope(request: Request, call_next) -> Response:
    """Answer preflights directly and stamp CORS headers on every response."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    try:
        response = await call_next(request)
    except Exception as exc:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        response = error_response(str(exc) or "Unknown error", 500)
    response.headers.update(CORS_HEADERS)
    return response


def install(app: FastAPI) -> None:
    """Register the CORS middleware and error handlers on ``app``."""
    app.middleware("http")(cors_envelope)
    app.add_exception_handler(UserAdminError, user_admin_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
