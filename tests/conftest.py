"""Shared fixtures and fakes for the news digest tests.

Nothing here talks to a real search provider or language model.
"""

import re
from typing import Callable, Dict, List, Union

import pytest

from news_digest.models.news import NewsSource, RawSearchResult
from news_digest.models.search import CompletionRequest, SearchRequest


ARTICLE_BODY = (
    "Chipmakers reported stronger than expected quarterly revenue on Tuesday as demand "
    "for data center processors continued to climb. Executives said supply constraints "
    "would ease next year, while analysts raised their full-year forecasts for the sector. "
    "Shares rose in early trading after the results were published."
)

_SITE = re.compile(r"site:([^\s/()]+)")


def make_result(
    title: str = "Nvidia chip sales lift quarterly revenue forecast",
    url: str = "https://example.com/2024/01/15/story",
    text: str | None = ARTICLE_BODY,
    published_date: str | None = "2024-01-15T10:00:00Z",
) -> RawSearchResult:
    return RawSearchResult(url=url, title=title, text=text, published_date=published_date)


class FakeSearchProvider:
    """Returns canned results per ``site:`` domain, or raises a canned error."""

    def __init__(self, responses: Dict[str, Union[List[RawSearchResult], Exception]]) -> None:
        self.responses = responses
        self.requests: List[SearchRequest] = []

    async def search(self, request: SearchRequest) -> List[RawSearchResult]:
        self.requests.append(request)
        match = _SITE.search(request.query)
        domain = match.group(1) if match else ""
        response = self.responses.get(domain, [])
        if isinstance(response, Exception):
            raise response
        return list(response)


class FakeTextModel:
    def __init__(self, reply: Union[str, Exception, Callable[[CompletionRequest], str]] = "Stub summary.") -> None:
        self.reply = reply
        self.requests: List[CompletionRequest] = []

    async def generate(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        if isinstance(self.reply, Exception):
            raise self.reply
        if callable(self.reply):
            return self.reply(request)
        return self.reply


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def article_body() -> str:
    return ARTICLE_BODY


@pytest.fixture
def tech_source() -> NewsSource:
    return NewsSource(name="Example", domain="example.com")


@pytest.fixture
def bloomberg() -> NewsSource:
    return NewsSource(name="Bloomberg", domain="bloomberg.com")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
