# page_translator/llm/errors.py
class LLMError(Exception):
    """Base LLM error (wrapped)."""

class LLMRetryableError(LLMError):
    """Transient error: timeouts, 429s, quota exhaustion, 5xx, network."""

class LLMNonRetryableError(LLMError):
    """Bad request, auth, missing image in response."""

class StageFailureError(LLMError):
    """A pipeline stage exhausted its retries.

    The message is the provider's message, unchanged, so it can be shown to the user.
    """

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage
