"""
exception_handlers.py
- Purpose: Every error leaves the API in one shape: {"error": {code, reason, message, details?}}.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from page_translator.core import AppError, ErrorCode, ErrorReason

logger = logging.getLogger("page_translator.exceptions")


def _where(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    # 4xx are caller mistakes, logged without a traceback
    logger.warning(
        "app_error",
        extra={**_where(request), "status_code": exc.status_code, "code": exc.code, "error": str(exc)},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]
    logger.info("request_invalid", extra={**_where(request), "errors": errors})
    err = AppError(
        code=ErrorCode.VALIDATION_ERROR,
        reason=ErrorReason.INVALID_INPUT.value,
        status_code=422,
        details={"errors": errors},
    )
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", extra=_where(request))
    err = AppError(code=ErrorCode.INTERNAL_ERROR, reason=ErrorReason.INTERNAL_ERROR.value, status_code=500)
    return JSONResponse(status_code=500, content=err.to_dict())
