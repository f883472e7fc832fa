"""
Request/page context helpers.

We keep a small context (request_id, page_number, attempt_id) in ContextVars.
HTTP middleware and the page lifecycle controller set these values so logs
become correlatable across a page's translation and its detached evaluation.
Asyncio tasks copy the context when they are created.

No external dependencies.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Dict, Optional


_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_page_number: ContextVar[Optional[int]] = ContextVar("page_number", default=None)
_attempt_id: ContextVar[Optional[str]] = ContextVar("attempt_id", default=None)


def set_context(
    *,
    request_id: Optional[str] = None,
    page_number: Optional[int] = None,
    attempt_id: Optional[str] = None,
) -> None:
    if request_id is not None:
        _request_id.set(request_id)
    if page_number is not None:
        _page_number.set(page_number)
    if attempt_id is not None:
        _attempt_id.set(attempt_id)


def clear_context() -> None:
    _request_id.set(None)
    _page_number.set(None)
    _attempt_id.set(None)


def clear_page_context() -> None:
    _page_number.set(None)
    _attempt_id.set(None)


def get_context() -> Dict[str, Any]:
    ctx: Dict[str, Any] = {}
    rid = _request_id.get()
    page = _page_number.get()
    attempt = _attempt_id.get()

    if rid:
        ctx["request_id"] = rid
    if page is not None:
        ctx["page_number"] = page
    if attempt:
        ctx["attempt_id"] = attempt
    return ctx
