from contextlib import asynccontextmanager
from functools import lru_cache
from typing import List, Literal

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from ..config import settings
from ..core.aggregator import NewsAggregator, create_aggregator
from ..errors import ProviderError
from ..logging_config import get_logger
from ..models.news import SearchHit, SourceResult


logger = get_logger("api.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Missing credentials are fatal for the whole process.
    settings.require_credentials()
    logger.info("startup", search_backend=settings.search_backend, model=settings.google_chat_model)
    yield


app = FastAPI(
    title="News Digest API",
    description="Aggregated tech and finance news with short AI summaries",
    version="1.0.0",
    lifespan=lifespan,
)


@lru_cache(maxsize=1)
def get_aggregator() -> NewsAggregator:
    return create_aggregator()


class NewsRequest(BaseModel):
    custom_sources: List[str] = []
    category: Literal["TECH", "FINANCE"] = "TECH"


class SearchQueryRequest(BaseModel):
    query: str = ""


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


async def _aggregate(custom_sources: List[str], category: str) -> List[SourceResult]:
    logger.info("news_request", category=category, custom_sources=len(custom_sources))
    try:
        return await get_aggregator().aggregate(custom_sources, category)
    except Exception as exc:
        logger.error("news_error", error=str(exc))
        raise HTTPException(status_code=500, detail=f"Failed to fetch news: {exc}")


@app.get("/news", response_model=List[SourceResult])
async def get_news(
    category: Literal["TECH", "FINANCE"] = "TECH",
    source: List[str] = Query(default=[]),
) -> List[SourceResult]:
    """Aggregate the default sources plus any ``source`` URLs given."""
    return await _aggregate(source, category)


@app.post("/news", response_model=List[SourceResult])
async def post_news(req: NewsRequest) -> List[SourceResult]:
    return await _aggregate(req.custom_sources, req.category)


@app.post("/search", response_model=List[SearchHit])
async def search(req: SearchQueryRequest) -> List[SearchHit]:
    """Free-text search across the default sources.

    Hits carry an extractive preview rather than a generated summary.
    """
    if not req.query.strip():
        raise HTTPException(status_code=400, detail="Search query is required")

    logger.info("search_request", query=req.query[:50])
    try:
        hits = await get_aggregator().search(req.query)
    except ProviderError as exc:
        logger.error("search_error", error=str(exc))
        raise HTTPException(status_code=500, detail=f"Failed to search news: {exc}")

    logger.info("search_response", query=req.query[:50], hits=len(hits))
    return hits
