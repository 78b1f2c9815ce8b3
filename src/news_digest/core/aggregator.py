"""Per-source news aggregation.

For every default source, then every resolved custom source, the aggregator
builds a query, searches, filters and trims the hits, and summarizes the
survivors. Each source ends in exactly one state: success with articles,
or failure with an error message and no articles. A failing source never
affects the others.
"""

import asyncio
from datetime import date, timedelta
from typing import Callable, Iterable, List, Optional, Sequence

import structlog

from ..config import settings
from ..errors import ProviderError
from ..logging_config import get_logger
from ..models.news import (
    Article,
    NewsSource,
    RawSearchResult,
    SearchHit,
    SourceResult,
    parse_published_date,
)
from ..models.search import SearchRequest
from ..tools.cache import TTLCache, fingerprint
from ..tools.exa_tool import ExaSearchProvider
from ..tools.gemini_tool import GeminiTextModel
from ..tools.search_base import SearchProvider
from ..tools.tavily_tool import TavilySearchProvider
from .query_builder import build_query, build_search_query, normalize_category
from .relevance import MIN_BODY_LENGTH, is_section_header, select_relevant
from .source_resolver import DEFAULT_SOURCES, normalize_domain, resolve_custom_sources
from .summarization import ArticleSummarizer
from .text_cleaner import clean_article_text, collapse_whitespace


logger = get_logger("core.aggregator")

CUSTOM_SOURCE_PREFIX = "Custom: "
URL_ID_SUFFIX_CHARS = 24
SEARCH_PREVIEW_CHARS = 200
SEARCH_NUM_RESULTS = 20


def article_id(source_name: str, position: int, url: str) -> str:
    """Stable display id from the source, rank within the source and URL tail."""

    suffix = url.rstrip("/")[-URL_ID_SUFFIX_CHARS:]
    return f"{source_name}-{position}-{suffix}"


class NewsAggregator:
    def __init__(
        self,
        search_provider: SearchProvider,
        summarizer: ArticleSummarizer,
        sources: Optional[Sequence[NewsSource]] = None,
        search_cache: Optional[TTLCache[List[RawSearchResult]]] = None,
        max_articles: Optional[int] = None,
        num_results: Optional[int] = None,
        lookback_days: Optional[int] = None,
        timeout: Optional[float] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._provider = search_provider
        self._summarizer = summarizer
        self.sources: List[NewsSource] = list(sources if sources is not None else DEFAULT_SOURCES)
        self._search_cache: TTLCache[List[RawSearchResult]] = (
            search_cache if search_cache is not None else TTLCache(settings.search_cache_ttl_seconds)
        )
        self._max_articles = (
            max_articles if max_articles is not None else settings.max_articles_per_source
        )
        self._num_results = num_results if num_results is not None else settings.search_num_results
        self._lookback_days = (
            lookback_days if lookback_days is not None else settings.lookback_days
        )
        self._timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._today = today

    def start_date(self) -> date:
        return self._today() - timedelta(days=self._lookback_days)

    def search_request(self, query: str, num_results: Optional[int] = None) -> SearchRequest:
        return SearchRequest(
            query=query,
            num_results=num_results or self._num_results,
            text=True,
            start_published_date=self.start_date(),
            use_author_extraction=True,
            use_body_extraction=True,
        )

    async def _search(self, request: SearchRequest) -> List[RawSearchResult]:
        key = fingerprint(*request.cache_key_parts())
        cached = self._search_cache.get(key)
        if cached is not None:
            logger.info("search_cache_hit", query=request.query, results=len(cached))
            return cached

        try:
            results = await asyncio.wait_for(self._provider.search(request), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderError(f"Search timed out after {self._timeout}s") from exc

        self._search_cache.set(key, results)
        logger.info("search_cache_miss", query=request.query, results=len(results))
        return results

    async def _build_article(
        self, label: str, position: int, result: RawSearchResult, domain: str
    ) -> Article:
        title = (result.title or "").strip()
        text = clean_article_text(result.text, domain)
        summary = await self._summarizer.summarize(title, text)
        return Article(
            id=article_id(label, position, result.url),
            title=title,
            url=result.url,
            text=text,
            summary=summary,
            published_date=result.published_date or "",
        )

    async def fetch_source(
        self,
        source: NewsSource,
        category: str,
        label: Optional[str] = None,
        source_url: Optional[str] = None,
    ) -> SourceResult:
        label = label or source.name
        try:
            request = self.search_request(build_query(source, category))
            results = await self._search(request)
            kept, rejected = select_relevant(results, source, category, self._max_articles)
            if rejected:
                logger.info(
                    "source_results_rejected",
                    source=label,
                    kept=len(kept),
                    rejected=dict(rejected),
                )
            articles = await asyncio.gather(
                *(
                    self._build_article(label, position, result, source.domain)
                    for position, result in enumerate(kept)
                )
            )
        except ProviderError as exc:
            logger.warning("source_failed", source=label, domain=source.domain, error=str(exc))
            return SourceResult.failure(
                label, str(exc) or "Search provider error", source_url=source_url
            )
        except Exception as exc:
            logger.exception("source_failed_unexpectedly", source=label, domain=source.domain)
            return SourceResult.failure(
                label, f"Unexpected error: {str(exc) or exc.__class__.__name__}", source_url=source_url
            )

        return SourceResult.success(label, list(articles), source_url=source_url)

    async def aggregate(
        self, custom_urls: Iterable[str] = (), category: str = "TECH"
    ) -> List[SourceResult]:
        """Aggregate default sources, then custom sources, one result each.

        Custom URLs are deduplicated by domain against the default sources and
        each other; their results are labelled with ``CUSTOM_SOURCE_PREFIX``
        and carry the originating URL as ``source_url``.
        """

        category = normalize_category(category)
        custom_sources = resolve_custom_sources(
            list(custom_urls or []), [source.domain for source in self.sources]
        )

        structlog.contextvars.bind_contextvars(category=category)
        try:
            logger.info(
                "aggregate_start",
                default_sources=len(self.sources),
                custom_sources=len(custom_sources),
            )
            tasks = [self.fetch_source(source, category) for source in self.sources]
            tasks.extend(
                self.fetch_source(
                    source,
                    category,
                    label=f"{CUSTOM_SOURCE_PREFIX}{source.name}",
                    source_url=source.url,
                )
                for source in custom_sources
            )
            results = list(await asyncio.gather(*tasks))
            logger.info(
                "aggregate_done",
                succeeded=sum(1 for result in results if result.ok),
                failed=sum(1 for result in results if not result.ok),
                articles=sum(len(result.articles) for result in results),
            )
        finally:
            structlog.contextvars.unbind_contextvars("category")
        return results

    def _source_for_url(self, url: str) -> Optional[NewsSource]:
        host = normalize_domain(url)
        if host is None:
            return None
        for source in self.sources:
            if host == source.domain or host.endswith(f".{source.domain}"):
                return source
        return None

    async def search(self, query: str) -> List[SearchHit]:
        """Free-text search across the default sources with extractive previews.

        Raises ``ValueError`` for a blank query and lets ``ProviderError``
        propagate.
        """

        if not query or not query.strip():
            raise ValueError("Search query is required")

        request = self.search_request(
            build_search_query(self.sources, query), num_results=SEARCH_NUM_RESULTS
        )
        results = await self._search(request)

        hits: List[SearchHit] = []
        for position, result in enumerate(results):
            if not result.title or not result.published_date or is_section_header(result.title):
                continue
            if len(result.text or "") < MIN_BODY_LENGTH:
                continue
            source = self._source_for_url(result.url)
            name = source.name if source else "Unknown Source"
            preview = clean_article_text(result.text, source.domain if source else None)
            preview = preview or collapse_whitespace(result.text or "")
            hits.append(
                SearchHit(
                    id=article_id(name, position, result.url),
                    title=result.title.strip(),
                    url=result.url,
                    published_date=result.published_date,
                    summary=f"{preview[:SEARCH_PREVIEW_CHARS]}...",
                    source=name,
                )
            )

        hits.sort(key=lambda hit: parse_published_date(hit.published_date), reverse=True)
        logger.info("search_done", query=query, results=len(results), hits=len(hits))
        return hits


def create_aggregator() -> NewsAggregator:
    """Wire the configured search backend and Gemini summarizer together.

    Raises ``ConfigurationError`` when a required credential is absent.
    """

    settings.require_credentials()
    if settings.search_backend == "tavily":
        provider: SearchProvider = TavilySearchProvider()
    else:
        provider = ExaSearchProvider()
    summarizer = ArticleSummarizer(GeminiTextModel())
    return NewsAggregator(provider, summarizer)
