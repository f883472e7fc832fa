# page_translator/llm/providers/gemini.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from page_translator.llm.errors import LLMNonRetryableError, LLMRetryableError
from page_translator.llm.retry import looks_transient
from page_translator.llm.types import ImagePart, LLMRequest, LLMResponse


def classify_api_error(code: int | None, message: str) -> type[Exception]:
    """Map a provider failure to the retryable / non-retryable split."""
    if code is not None:
        if code == 429 or code >= 500:
            return LLMRetryableError
        return LLMNonRetryableError
    return LLMRetryableError if looks_transient(message) else LLMNonRetryableError


@dataclass
class GeminiProvider:
    """
    Gemini provider using Google Gen AI SDK (google-genai), async surface.
    Single-attempt. Retries are handled by page_translator/llm/retry.py.
    """
    api_key: str | None = None
    _client: Optional[genai.Client] = None

    @property
    def name(self) -> str:
        return "gemini"

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> genai.Client:
        if not self.api_key:
            raise LLMNonRetryableError("GEMINI_API_KEY is missing")
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _config(self, req: LLMRequest) -> types.GenerateContentConfig:
        image_config = None
        if req.aspect_ratio or req.image_size:
            image_config = types.ImageConfig(aspect_ratio=req.aspect_ratio, image_size=req.image_size)

        return types.GenerateContentConfig(
            temperature=req.temperature,
            response_mime_type=req.response_mime_type,
            response_schema=req.response_schema,
            image_config=image_config,
            # HttpOptions timeout is in milliseconds
            http_options=types.HttpOptions(timeout=int(req.timeout_seconds * 1000)),
        )

    async def generate(self, req: LLMRequest) -> LLMResponse:
        client = self._get_client()
        start_ms = int(time.time() * 1000)

        contents: list = [req.prompt]
        contents.extend(types.Part.from_bytes(data=img.data, mime_type=img.mime_type) for img in req.images)

        try:
            resp = await client.aio.models.generate_content(
                model=req.model,
                contents=contents,
                config=self._config(req),
            )
        # ---- classify retryable failures first (so with_retry retries) ----
        except genai_errors.APIError as e:
            raise classify_api_error(getattr(e, "code", None), str(e))(str(e)) from e
        except (httpx.TimeoutException, TimeoutError) as e:
            raise LLMRetryableError(f"Gemini call timed out: {e}") from e
        except httpx.HTTPError as e:
            raise LLMRetryableError(str(e)) from e
        except Exception as e:
            raise classify_api_error(None, str(e))(str(e)) from e

        texts: list[str] = []
        images: list[ImagePart] = []
        candidates = getattr(resp, "candidates", None) or []
        parts = []
        if candidates and candidates[0].content is not None:
            parts = candidates[0].content.parts or []
        for part in parts:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                images.append(ImagePart(mime_type=inline.mime_type or "image/png", data=inline.data))
            elif getattr(part, "text", None) and not getattr(part, "thought", False):
                texts.append(part.text)

        # Token usage: best-effort, won't break if missing
        input_tokens = None
        output_tokens = None
        usage = getattr(resp, "usage_metadata", None)
        if usage is not None:
            input_tokens = getattr(usage, "prompt_token_count", None)
            output_tokens = getattr(usage, "candidates_token_count", None)

        return LLMResponse(
            trace_id=req.trace_id,
            provider=self.name,
            model=req.model,
            output_text="".join(texts).strip(),
            latency_ms=int(time.time() * 1000) - start_ms,
            images=tuple(images),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
