from typing import Any, Dict, List

import httpx

from ..config import settings
from ..errors import ConfigurationError, ProviderError
from ..logging_config import get_logger
from ..models.news import RawSearchResult
from ..models.search import SearchRequest
from .search_base import parse_search_results


logger = get_logger("tools.exa_tool")


class ExaSearchProvider:
    """Search provider backed by the Exa REST search endpoint.

    Each call is a single attempt bounded by ``timeout``; transport errors,
    non-2xx responses and malformed bodies all surface as ``ProviderError``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or settings.exa_api_key
        if not self._api_key:
            raise ConfigurationError("EXA_API_KEY is not configured in the environment.")
        self._base_url = base_url or settings.exa_search_url
        self._timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._transport = transport

    def build_payload(self, request: SearchRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "query": request.query,
            "numResults": request.num_results,
            "startPublishedDate": request.start_published_date.isoformat(),
            "contents": {"text": request.text},
        }
        if request.exclude_sites:
            payload["excludeDomains"] = list(request.exclude_sites)
        return payload

    async def search(self, request: SearchRequest) -> List[RawSearchResult]:
        headers = {"x-api-key": self._api_key, "Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._base_url, json=self.build_payload(request), headers=headers
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            raise ProviderError(f"Search request timed out after {self._timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"Search request failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Search request failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError("Search provider returned non-JSON content.") from exc

        results = parse_search_results(data)
        logger.info("exa_search_complete", query=request.query, results=len(results))
        return results
