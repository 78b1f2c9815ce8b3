import asyncio

from conftest import FakeTextModel
from news_digest.core.prompts import SUMMARIZER_SYSTEM_PROMPT
from news_digest.core.summarization import ArticleSummarizer, fallback_summary
from news_digest.errors import ProviderError
from news_digest.tools.cache import TTLCache


def _summarizer(model, clock=None, ttl=3600) -> ArticleSummarizer:
    cache = TTLCache(ttl_seconds=ttl, clock=clock) if clock else TTLCache(ttl_seconds=ttl)
    return ArticleSummarizer(model, cache=cache, temperature=0.3, max_output_tokens=150)


def test_cache_hit_issues_one_model_call() -> None:
    model = FakeTextModel("Chips sold. It matters.")
    summarizer = _summarizer(model)

    first = asyncio.run(summarizer.summarize("T", "C"))
    second = asyncio.run(summarizer.summarize("T", "C"))

    assert len(model.requests) == 1
    assert first == second == "Chips sold. It matters."


def test_cache_entry_expires_after_ttl(clock) -> None:
    model = FakeTextModel("Summary.")
    summarizer = _summarizer(model, clock=clock, ttl=3600)

    asyncio.run(summarizer.summarize("T", "C"))
    clock.advance(3601)
    asyncio.run(summarizer.summarize("T", "C"))

    assert len(model.requests) == 2


def test_fallback_when_model_fails() -> None:
    model = FakeTextModel(ProviderError("boom"))
    summary = asyncio.run(_summarizer(model).summarize("My Title", "body"))
    assert summary
    assert "My Title" in summary
    assert summary == fallback_summary("My Title")


def test_fallback_is_not_cached() -> None:
    model = FakeTextModel(RuntimeError("down"))
    summarizer = _summarizer(model)
    asyncio.run(summarizer.summarize("My Title", "body"))
    model.reply = "Recovered summary."
    assert asyncio.run(summarizer.summarize("My Title", "body")) == "Recovered summary."
    assert len(model.requests) == 2


def test_empty_response_uses_fallback() -> None:
    model = FakeTextModel("   ")
    summary = asyncio.run(_summarizer(model).summarize("Quiet launch", "body"))
    assert summary.startswith("Quiet launch.")


def test_request_carries_prompt_and_sampling_settings() -> None:
    model = FakeTextModel("Summary.")
    asyncio.run(_summarizer(model).summarize("Chip sales rise", "Revenue grew sharply."))

    request = model.requests[0]
    assert request.system_instruction == SUMMARIZER_SYSTEM_PROMPT
    assert "exactly 2 sentences" in request.system_instruction
    assert request.temperature == 0.3
    assert request.max_output_tokens == 150
    assert "Chip sales rise" in request.user_content
    assert "Revenue grew sharply." in request.user_content


def test_empty_text_summarizes_title_only() -> None:
    model = FakeTextModel("Summary.")
    asyncio.run(_summarizer(model).summarize("Chip sales rise", ""))
    assert model.requests[0].user_content == "Title: Chip sales rise"


def test_cache_key_uses_text_prefix_only() -> None:
    prefix = "a" * 500
    assert ArticleSummarizer.cache_key("T", prefix + "one") == ArticleSummarizer.cache_key("T", prefix + "two")
    assert ArticleSummarizer.cache_key("T", "one") != ArticleSummarizer.cache_key("U", "one")
