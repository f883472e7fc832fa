"""
statuses.py
- Purpose: Central source of truth for page and pipeline statuses.
- Design: Keep UI-facing statuses stable and explicit.
"""

from enum import Enum


class PageStatus(str, Enum):
    PENDING = "PENDING"
    TRANSLATING = "TRANSLATING"
    DONE = "DONE"
    ERROR = "ERROR"


class ProcessingStatus(str, Enum):
    IDLE = "IDLE"
    TRANSLATING = "TRANSLATING"
    COMPLETED = "COMPLETED"


class TranslationMode(str, Enum):
    DIRECT = "DIRECT"
    TWO_STEP = "TWO_STEP"


class UsageStage(str, Enum):
    EXTRACTION = "extraction"
    TRANSLATION = "translation"
    EVALUATION = "evaluation"
