from typing import Any, List, Protocol

from pydantic import ValidationError

from ..errors import ProviderError
from ..logging_config import get_logger
from ..models.news import RawSearchResult
from ..models.search import SearchRequest


logger = get_logger("tools.search_base")


class SearchProvider(Protocol):
    async def search(self, request: SearchRequest) -> List[RawSearchResult]:
        ...


def parse_search_results(payload: Any) -> List[RawSearchResult]:
    """Validate an untrusted provider payload into ``RawSearchResult`` objects.

    A payload that is not a mapping, or whose ``results`` is absent or not a
    list, is a provider error. Individual entries without a usable ``url``
    are dropped.
    """

    if not isinstance(payload, dict):
        raise ProviderError("Invalid search response: expected a JSON object.")
    raw_results = payload.get("results")
    if not isinstance(raw_results, list):
        raise ProviderError("Invalid search response: missing results list.")

    results: List[RawSearchResult] = []
    dropped = 0
    for item in raw_results:
        if not isinstance(item, dict) or not isinstance(item.get("url"), str) or not item["url"].strip():
            dropped += 1
            continue
        try:
            results.append(RawSearchResult.model_validate(_coerce_optional_strings(item)))
        except ValidationError:
            dropped += 1

    if dropped:
        logger.info("search_results_dropped_invalid", dropped=dropped, kept=len(results))
    return results


def _coerce_optional_strings(item: dict) -> dict:
    # Providers occasionally send null or non-string values for optional fields.
    cleaned = dict(item)
    for key in ("title", "text", "publishedDate", "published_date"):
        if key in cleaned and not isinstance(cleaned[key], str):
            cleaned[key] = None
    return cleaned
