# page_translator/core/__init__.py
from page_translator.core.errors import AppError
from page_translator.core.error_codes import ErrorCode
from page_translator.core.error_reasons import ErrorReason

__all__ = ["AppError", "ErrorCode", "ErrorReason"]
