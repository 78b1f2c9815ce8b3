from ..config import settings
from ..logging_config import get_logger
from ..models.search import CompletionRequest
from ..tools.cache import TTLCache, fingerprint
from ..tools.gemini_tool import TextModel
from .prompts import SUMMARIZER_SYSTEM_PROMPT, build_summary_user_content


logger = get_logger("core.summarization")

# Only this much of the body feeds the cache key; articles that differ
# further down are treated as the same story.
FINGERPRINT_TEXT_CHARS = 500
MAX_INPUT_CHARS = 6000


def fallback_summary(title: str) -> str:
    title = title.strip().rstrip(".") or "This story"
    return f"{title}. This news could have significant implications for the tech industry."


class ArticleSummarizer:
    """Two-sentence article summaries from a language model, cached by content.

    Provider failures never escape ``summarize``: the caller gets a
    deterministic title-based fallback instead, and fallbacks are not cached.
    """

    def __init__(
        self,
        model: TextModel,
        cache: TTLCache[str] | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> None:
        self._model = model
        self._cache: TTLCache[str] = (
            cache if cache is not None else TTLCache(settings.summary_cache_ttl_seconds)
        )
        self._temperature = (
            temperature if temperature is not None else settings.summary_temperature
        )
        self._max_output_tokens = (
            max_output_tokens
            if max_output_tokens is not None
            else settings.summary_max_output_tokens
        )

    @staticmethod
    def cache_key(title: str, cleaned_text: str) -> str:
        return fingerprint(title, cleaned_text[:FINGERPRINT_TEXT_CHARS])

    def build_request(self, title: str, cleaned_text: str) -> CompletionRequest:
        return CompletionRequest(
            system_instruction=SUMMARIZER_SYSTEM_PROMPT,
            user_content=build_summary_user_content(title, cleaned_text[:MAX_INPUT_CHARS]),
            max_output_tokens=self._max_output_tokens,
            temperature=self._temperature,
        )

    async def summarize(self, title: str, cleaned_text: str) -> str:
        key = self.cache_key(title, cleaned_text)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("summary_cache_hit", title=title[:50])
            return cached

        try:
            summary = await self._model.generate(self.build_request(title, cleaned_text))
        except Exception as exc:
            logger.warning("summary_fallback", title=title[:50], error=str(exc))
            return fallback_summary(title)

        summary = (summary or "").strip()
        if not summary:
            logger.warning("summary_fallback", title=title[:50], error="empty response")
            return fallback_summary(title)

        self._cache.set(key, summary)
        return summary
