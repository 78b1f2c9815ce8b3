"""Request shapes for the two external services the pipeline consumes.

Both are plain data: the adapters in ``news_digest.tools`` decide how each
field reaches the wire for their provider.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from .news import CamelModel


class SearchRequest(CamelModel):
    query: str
    num_results: int = 20
    text: bool = True
    start_published_date: date
    use_author_extraction: bool = True
    use_body_extraction: bool = True
    sort_by: Optional[str] = None
    exclude_sites: List[str] = Field(default_factory=list)

    def cache_key_parts(self) -> tuple:
        return (
            self.query,
            self.num_results,
            self.start_published_date.isoformat(),
            ",".join(sorted(self.exclude_sites)),
        )


class CompletionRequest(CamelModel):
    system_instruction: str
    user_content: str
    max_output_tokens: int = 150
    temperature: float = 0.3
