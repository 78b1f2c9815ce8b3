from .news import (  # noqa: F401
    Article,
    Category,
    NewsSource,
    RawSearchResult,
    SearchHit,
    SourceResult,
    parse_published_date,
)
from .search import CompletionRequest, SearchRequest  # noqa: F401
