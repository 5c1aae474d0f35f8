# staffing/api/errors.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from staffing.services.errors import (
    ConflictError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _field_of(loc) -> str:
    # ("body", "end_time") -> "end_time"; ("query", "page") -> "page"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or str(loc[-1])


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConflictError)
    async def _conflict(_request: Request, exc: ConflictError):
        return JSONResponse(
            status_code=400,
            content={
                "error": "SCHEDULE_CONFLICT",
                "message": exc.message,
                "conflicting_assignment_id": str(exc.conflicting_id) if exc.conflicting_id else None,
            },
        )

    @app.exception_handler(ValidationError)
    async def _validation(_request: Request, exc: ValidationError):
        details = [{"field": exc.field, "message": exc.message}] if exc.field else []
        return JSONResponse(
            status_code=400,
            content={"error": "VALIDATION_ERROR", "message": exc.message, "details": details},
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation(_request: Request, exc: RequestValidationError):
        details = [{"field": _field_of(e["loc"]), "message": e["msg"]} for e in exc.errors()]
        return JSONResponse(
            status_code=400,
            content={"error": "VALIDATION_ERROR", "message": "Invalid request", "details": details},
        )

    @app.exception_handler(NotFoundError)
    async def _not_found(_request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": "NOT_FOUND", "message": exc.message})

    @app.exception_handler(TransientStoreError)
    async def _transient(_request: Request, exc: TransientStoreError):
        logger.error("request failed after retries: %s", exc.message)
        return JSONResponse(
            status_code=503,
            content={"error": "STORE_UNAVAILABLE", "message": "Temporary storage failure, retry later"},
        )
