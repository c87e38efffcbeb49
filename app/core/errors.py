from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.logger import get_logger

log = get_logger(__name__)


class TranscriptStoreError(Exception):
    """Base class for errors raised by the transcript store and its routes."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TranscriptStoreError):
    """Malformed or missing required field."""

    status_code = 400


class NotFoundError(TranscriptStoreError):
    """Reference to a transcript that does not exist."""

    status_code = 404


async def _store_error_handler(request: Request, exc: TranscriptStoreError) -> JSONResponse:
    log.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Undecodable JSON and bad query params surface as 400 like store validation
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body" and not isinstance(part, int))
    msg = first.get("msg", "Invalid request")
    return await _store_error_handler(request, ValidationError(f"{loc}: {msg}" if loc else msg))


def _method_not_allowed_handler(allowed_by_path: Dict[str, List[str]]):
    """Build an HTTPException handler that answers 405s with the resource's own Allow list."""

    async def _handler(request: Request, exc: StarletteHTTPException):
        allowed = allowed_by_path.get(request.url.path.rstrip("/"))
        if exc.status_code != 405 or allowed is None:
            return await http_exception_handler(request, exc)
        log.warning("%s %s -> 405", request.method, request.url.path)
        return JSONResponse(
            status_code=405,
            content={"error": f"Method {request.method} Not Allowed"},
            headers={"Allow": ", ".join(allowed)},
        )

    return _handler


def register_error_handlers(app: FastAPI, allowed_by_path: Optional[Dict[str, List[str]]] = None) -> None:
    app.add_exception_handler(TranscriptStoreError, _store_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _method_not_allowed_handler(allowed_by_path or {}))
