"""
request_logging.py
- Purpose: Tag every request with a request id and log it once in, once out.
- Design: the request id lives in a ContextVar, so translation tasks scheduled by a
  request keep logging under the id of the request that started them.
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from page_translator.core.request_context import clear_context, set_context

logger = logging.getLogger("page_translator.http")

# The UI polls these while a batch runs; keep them out of INFO logs
_POLLED_PATHS = frozenset({"/api/pages", "/api/usage", "/api/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex
        set_context(request_id=rid)
        level = logging.DEBUG if request.method == "GET" and request.url.path in _POLLED_PATHS else logging.INFO
        where = {"method": request.method, "path": request.url.path}

        started = time.perf_counter()
        try:
            logger.log(level, "http.request", extra=where)
            response = await call_next(request)
            logger.log(
                level,
                "http.response",
                extra={
                    **where,
                    "status_code": response.status_code,
                    "duration_ms": int((time.perf_counter() - started) * 1000),
                },
            )
            response.headers["x-request-id"] = rid
            return response
        finally:
            clear_context()
