import asyncio
from typing import Protocol

import google.generativeai as genai

from ..config import settings
from ..errors import ConfigurationError, ProviderError
from ..logging_config import get_logger
from ..models.search import CompletionRequest


logger = get_logger("tools.gemini_tool")


class TextModel(Protocol):
    async def generate(self, request: CompletionRequest) -> str:
        ...


class GeminiTextModel:
    """Single-shot text completion against a Gemini chat model."""

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        timeout: float | None = None,
    ) -> None:
        api_key = api_key or settings.google_api_key
        if not api_key:
            raise ConfigurationError("GOOGLE_API_KEY is not configured in the environment.")
        genai.configure(api_key=api_key)
        self.model_name = model_name or settings.google_chat_model
        self._timeout = timeout if timeout is not None else settings.request_timeout_seconds

    def _model(self, system_instruction: str) -> genai.GenerativeModel:
        return genai.GenerativeModel(self.model_name, system_instruction=system_instruction)

    async def generate(self, request: CompletionRequest) -> str:
        model = self._model(request.system_instruction)
        config = genai.GenerationConfig(
            max_output_tokens=request.max_output_tokens,
            temperature=request.temperature,
        )
        try:
            response = await asyncio.wait_for(
                model.generate_content_async(request.user_content, generation_config=config),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderError(f"Language model call timed out after {self._timeout}s") from exc
        except Exception as exc:
            raise ProviderError(f"Language model call failed: {exc}") from exc

        try:
            # ``.text`` raises when the candidate was blocked or has no parts.
            content = response.text or ""
        except Exception as exc:
            logger.warning("gemini_invalid_response", model=self.model_name, error=str(exc))
            raise ProviderError("Language model returned an invalid response structure.") from exc
        return content.strip()
