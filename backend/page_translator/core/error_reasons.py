"""
error_reasons.py
- Purpose: Human-friendly "reason" strings.
- Keep these stable; they may be surfaced in the UI.
"""

from enum import Enum


class ErrorReason(str, Enum):
    UNKNOWN = "Unknown error"

    INVALID_INPUT = "Invalid input"
    RESOURCE_NOT_FOUND = "Resource not found"
    ALREADY_RUNNING = "Operation already running"

    PDF_INVALID = "Invalid PDF"
    UNSUPPORTED_FILE = "Unsupported file type"
    INTERNAL_ERROR = "Internal server error"

    TARGET_LANGUAGE_REQUIRED = "Please select a target language."
    API_KEY_REQUIRED = "Please configure a Gemini API key first."
    NO_TRANSLATED_PAGES = "No translated pages to export."
    NO_USAGE_DATA = "No usage data available."
    NO_EVALUATION_DATA = "No evaluation data available yet."
    PROJECT_INVALID = "Invalid project file"
