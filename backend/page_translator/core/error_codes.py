# page_translator/core/error_codes.py
from enum import Enum

class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"

    # Upload / PDF
    FILE_MISSING = "FILE_MISSING"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    PDF_INVALID = "PDF_INVALID"

    # Translation
    TARGET_LANGUAGE_MISSING = "TARGET_LANGUAGE_MISSING"
    API_KEY_MISSING = "API_KEY_MISSING"
    NOTHING_TO_EXPORT = "NOTHING_TO_EXPORT"

    # Project files
    PROJECT_INVALID = "PROJECT_INVALID"
    PROJECT_VERSION_UNSUPPORTED = "PROJECT_VERSION_UNSUPPORTED"
