# page_translator/services/project_store.py
"""
project_store.py
- Purpose: Save and restore a whole translation project as one JSON document.
- Design: the document is versioned; unknown versions are rejected rather than guessed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from pydantic import BaseModel, Field, ValidationError

from page_translator.core import AppError, ErrorCode, ErrorReason
from page_translator.schemas.page import PageRecord, TranslationSettings

logger = logging.getLogger("page_translator.project_store")

PROJECT_VERSION = 1
SUPPORTED_VERSIONS = frozenset({1})


class ProjectDocument(BaseModel):
    version: int = PROJECT_VERSION
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    document_name: str = "document"
    settings: TranslationSettings | None = None
    pages: list[PageRecord] = Field(default_factory=list)


def dump_project(
    pages: Sequence[PageRecord],
    settings: TranslationSettings | None,
    *,
    document_name: str = "document",
) -> str:
    doc = ProjectDocument(document_name=document_name, settings=settings, pages=list(pages))
    return doc.model_dump_json()


def load_project(raw: str | bytes) -> ProjectDocument:
    try:
        doc = ProjectDocument.model_validate_json(raw)
    except ValidationError as e:
        raise AppError(
            code=ErrorCode.PROJECT_INVALID,
            reason=ErrorReason.PROJECT_INVALID.value,
            message="Project file could not be read",
            status_code=422,
            details={"errors": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()[:5]]},
        ) from e

    if doc.version not in SUPPORTED_VERSIONS:
        raise AppError(
            code=ErrorCode.PROJECT_VERSION_UNSUPPORTED,
            reason=ErrorReason.PROJECT_INVALID.value,
            message=f"Unsupported project version {doc.version}",
            status_code=422,
        )

    numbers = [p.page_number for p in doc.pages]
    if len(numbers) != len(set(numbers)):
        raise AppError(
            code=ErrorCode.PROJECT_INVALID,
            reason=ErrorReason.PROJECT_INVALID.value,
            message="Project contains duplicate page numbers",
            status_code=422,
        )

    logger.info("project.loaded", extra={"pages": len(doc.pages), "version": doc.version})
    return doc
