"""Generation client — synchronous wrapper around an external LLM via LiteLLM.

One call is one stateless system+user exchange: no streaming, no history,
no automatic retry. Two failure channels are kept apart so callers can
treat them differently:

- ``GenerationError``: the provider could not be reached, rejected the
  request, timed out, or the client is not configured.
- ``EmptyGenerationError``: the provider answered, but with no text.
"""

import logging
from typing import Optional

from ..core.config import settings

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """The external generation capability failed to produce a response."""


class EmptyGenerationError(GenerationError):
    """The provider responded successfully but the text was empty."""


class GenerationClient:
    """Thin LiteLLM ``completion`` wrapper configured from settings."""

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.model = model if model is not None else settings.generation_model
        self.api_key = api_key if api_key is not None else settings.generation_api_key
        self.api_base = api_base if api_base is not None else settings.generation_api_base
        self.timeout = timeout if timeout is not None else settings.generation_timeout

    def is_configured(self) -> bool:
        return bool(self.model)

    def complete(self, system_instruction: str, user_instruction: str) -> str:
        """Run one completion and return the trimmed text.

        Raises:
            GenerationError: transport/provider failure or missing configuration.
            EmptyGenerationError: the response contained no text.
        """
        if not self.is_configured():
            raise GenerationError("Generation is not configured. Set GENERATION_MODEL.")

        messages = [
            {"role": "system", "content": system_instruction},
            {"role": "user", "content": user_instruction},
        ]

        kwargs: dict = {
            "model": self.model,
            "messages": messages,
            "timeout": self.timeout,
            "extra_headers": {
                "HTTP-Referer": settings.app_url,
                "X-Title": settings.app_name,
            },
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base

        try:
            import litellm

            response = litellm.completion(**kwargs)
        except Exception as e:
            logger.warning("Generation call failed: %s: %s", type(e).__name__, e)
            raise GenerationError(str(e)) from e

        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise EmptyGenerationError("Malformed completion response") from e

        text = (text or "").strip()
        if not text:
            raise EmptyGenerationError("Model returned an empty response")
        return text
