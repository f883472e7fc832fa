"""
errors.py
- Purpose: AppError used across services for consistent errors.
- Pattern: raise AppError(...) in a service, handler converts to JSON response.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import status as http_status
from page_translator.core.error_codes import ErrorCode
from page_translator.core.error_reasons import ErrorReason


@dataclass
class AppError(Exception):
    code: ErrorCode
    reason: str
    status_code: int = http_status.HTTP_400_BAD_REQUEST
    details: dict[str, Any] | None = None
    message: str | None = None  # Optional human-readable message

    def __str__(self) -> str:
        return self.message or self.reason

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": {
                "code": self.code,
                "reason": self.reason,
                "message": self.message if self.message else self.reason,
            }
        }
        if self.details:
            payload["error"]["details"] = self.details
        return payload


def _text(reason: str) -> str:
    return reason.value if isinstance(reason, Enum) else str(reason)


# Convenience constructors
def not_found(reason: str = ErrorReason.RESOURCE_NOT_FOUND, *, details: dict | None = None) -> AppError:
    return AppError(code=ErrorCode.NOT_FOUND, reason=_text(reason), status_code=http_status.HTTP_404_NOT_FOUND, details=details)


def conflict(reason: str = ErrorReason.ALREADY_RUNNING, *, details: dict | None = None) -> AppError:
    return AppError(code=ErrorCode.CONFLICT, reason=_text(reason), status_code=http_status.HTTP_409_CONFLICT, details=details)


def config_error(reason: str, *, code: ErrorCode = ErrorCode.CONFIG_ERROR) -> AppError:
    return AppError(code=code, reason=_text(reason), status_code=http_status.HTTP_400_BAD_REQUEST)
