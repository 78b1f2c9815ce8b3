import asyncio
import re
from datetime import date
from typing import Any, Dict, List, Tuple

from tavily import TavilyClient

from ..config import settings
from ..errors import ConfigurationError, ProviderError
from ..logging_config import get_logger
from ..models.news import RawSearchResult
from ..models.search import SearchRequest
from .search_base import parse_search_results


logger = get_logger("tools.tavily_tool")

_SITE_TERM = re.compile(r"\bsite:([^\s()]+)", re.IGNORECASE)
_EXCLUDED_PATH = re.compile(r"-inurl:\S+", re.IGNORECASE)


_client: TavilyClient | None = None


def _get_client() -> TavilyClient:
    """Return a shared TavilyClient instance, ensuring the API key is set."""

    global _client
    if _client is None:
        if not settings.tavily_api_key:
            raise ConfigurationError("TAVILY_API_KEY is not configured in the environment.")
        _client = TavilyClient(api_key=settings.tavily_api_key)
    return _client


def split_site_query(query: str) -> Tuple[List[str], str]:
    """Pull ``site:`` restrictions out of a query.

    Tavily scopes by domain through ``include_domains`` rather than query
    operators, so ``site:wsj.com/tech (ai OR chips)`` becomes
    ``(["wsj.com"], "(ai OR chips)")``. Path scopes are dropped.
    """

    domains: List[str] = []
    for match in _SITE_TERM.finditer(query):
        domain = match.group(1).split("/", 1)[0].lower()
        if domain and domain not in domains:
            domains.append(domain)
    remainder = _SITE_TERM.sub(" ", query)
    remainder = _EXCLUDED_PATH.sub(" ", remainder)
    remainder = re.sub(r"\(\s*(?:OR\s*)*\)", " ", remainder)
    remainder = re.sub(r"\s+", " ", remainder).strip()
    return domains, remainder


class TavilySearchProvider:
    """Alternate search backend using the official Tavily client."""

    def __init__(self, today: date | None = None) -> None:
        self._today = today

    def _days(self, request: SearchRequest) -> int:
        today = self._today or date.today()
        return max(1, (today - request.start_published_date).days)

    async def search(self, request: SearchRequest) -> List[RawSearchResult]:
        client = _get_client()
        domains, terms = split_site_query(request.query)

        kwargs: Dict[str, Any] = {
            "topic": "news",
            "search_depth": "basic",
            "max_results": request.num_results,
            "days": self._days(request),
            "include_answer": False,
            "include_raw_content": request.text,
        }
        if domains:
            kwargs["include_domains"] = domains
        if request.exclude_sites:
            kwargs["exclude_domains"] = list(request.exclude_sites)

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(client.search, terms or "news", **kwargs),
                timeout=settings.request_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderError("Tavily search timed out.") from exc
        except Exception as exc:
            raise ProviderError(f"Tavily search failed: {exc}") from exc

        if not isinstance(response, dict) or not isinstance(response.get("results"), list):
            raise ProviderError("Invalid search response from Tavily.")

        payload = {
            "results": [
                {
                    "url": item.get("url"),
                    "title": item.get("title"),
                    "text": item.get("raw_content") or item.get("content"),
                    "publishedDate": item.get("published_date"),
                }
                for item in response["results"]
                if isinstance(item, dict)
            ]
        }
        results = parse_search_results(payload)
        logger.info(
            "tavily_search_complete",
            domains=domains,
            results=len(results),
        )
        return results
