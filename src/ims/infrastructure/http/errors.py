"""Translate typed results and framework errors into the API error envelope.

Every error body has the shape
``{"detail": {"error": <code>, "message": <str>, "field": <str|null>}}``.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ims.domain.exceptions import PersistenceError
from ims.domain.results import LedgerFailure, Rejected, RejectionReason

logger = logging.getLogger(__name__)

T = TypeVar("T")

STATUS_BY_REASON = {
    RejectionReason.VALIDATION: 400,
    RejectionReason.NOT_AUTHENTICATED: 401,
    RejectionReason.FORBIDDEN: 403,
    RejectionReason.NOT_FOUND: 404,
    RejectionReason.INSUFFICIENT_STOCK: 409,
    RejectionReason.DUPLICATE_NAME: 409,
    RejectionReason.CONFLICT: 409,
    RejectionReason.NO_ENTRIES_REVIEWED: 422,
}


def error_detail(code: str, message: str, field: str | None = None) -> dict:
    return {"error": code, "message": message, "field": field}


def unwrap(result: T | Rejected | LedgerFailure) -> T:
    """Return a successful result or raise the matching HTTPException."""
    if isinstance(result, Rejected):
        raise HTTPException(
            status_code=STATUS_BY_REASON[result.reason],
            detail=error_detail(result.code, result.message, result.field),
        )
    if isinstance(result, LedgerFailure):
        raise HTTPException(
            status_code=500,
            detail={
                **error_detail(result.code, result.message, None),
                "item_id": result.item_id,
                "phase": result.phase.value,
                "compensation": result.compensation.value,
            },
        )
    return result


async def _validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or None,
            "message": err.get("msg", "invalid value"),
        }
        for err in exc.errors()
    ]
    detail = error_detail(
        RejectionReason.VALIDATION.value,
        "Invalid request body",
        fields[0]["field"] if fields else None,
    )
    detail["fields"] = fields
    return JSONResponse(status_code=400, content={"detail": detail})


async def _persistence_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("storage error", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(
        status_code=503,
        content={"detail": error_detail("storage_unavailable", "The stock store is unavailable")},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _validation_handler)
    app.add_exception_handler(PersistenceError, _persistence_handler)
