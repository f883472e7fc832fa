# page_translator/core/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent

class Settings(BaseSettings):
    app_name: str = "PageTranslator"
    env: str = "local"

    # =========================
    # Gemini
    # =========================
    GEMINI_API_KEY: str | None = None

    # Image model redraws pages; reasoning model extracts text and audits
    GEMINI_IMAGE_MODEL: str = "gemini-3-pro-image-preview"
    GEMINI_REASONING_MODEL: str = "gemini-3-pro-preview"

    # USD per 1M tokens
    PRICE_PER_1M_INPUT: float = 3.50
    PRICE_PER_1M_OUTPUT: float = 10.50

    # Runtime controls
    LLM_TIMEOUT_SECONDS: int = 180
    LLM_MAX_ATTEMPTS: int = 3
    LLM_RETRY_DELAY_SECONDS: float = 10.0
    EXTRACTION_TEMPERATURE: float = 0.1
    OUTPUT_IMAGE_SIZE: str = "4K"
    AUDIT_FEEDBACK_LANGUAGE: str = "English"

    # PDF rasterization upscaling factor
    RASTER_SCALE: float = 2.0

    # Observability
    LLM_LOG_PROMPTS: bool = False  # keep False by default (avoid leaking data)

    CORS_ALLOW_ORIGINS: str | None = None

    model_config = SettingsConfigDict(
        env_file=os.path.join(PROJECT_ROOT, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

settings = Settings()
