import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


Category = Literal["TECH", "FINANCE"]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class CamelModel(BaseModel):
    """Base for models that travel to the browser client as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NewsSource(BaseModel):
    name: str
    domain: str
    # The user-supplied URL a custom source was derived from.
    url: Optional[str] = None


class RawSearchResult(CamelModel):
    """A search provider hit that survived payload validation.

    Only ``url`` is guaranteed; everything else comes straight from the
    provider and may be missing.
    """

    url: str
    title: Optional[str] = None
    text: Optional[str] = None
    published_date: Optional[str] = None

    def published_at(self) -> datetime:
        """Parsed publication time; missing or unparseable dates sort as epoch."""

        return parse_published_date(self.published_date)


class Article(CamelModel):
    id: str
    title: str
    url: str
    text: str
    summary: str
    published_date: str


class SourceResult(CamelModel):
    source: str
    source_url: Optional[str] = None
    articles: List[Article] = []
    error: Optional[str] = None

    @model_validator(mode="after")
    def _error_excludes_articles(self) -> "SourceResult":
        if self.error is not None and self.articles:
            raise ValueError("a failed source result cannot carry articles")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls, source: str, articles: List[Article], source_url: Optional[str] = None
    ) -> "SourceResult":
        return cls(source=source, source_url=source_url, articles=articles)

    @classmethod
    def failure(
        cls, source: str, error: str, source_url: Optional[str] = None
    ) -> "SourceResult":
        return cls(source=source, source_url=source_url, articles=[], error=error)


class SearchHit(CamelModel):
    """A cross-source search result with an extractive (non-LLM) preview."""

    id: str
    title: str
    url: str
    published_date: str
    summary: str
    source: str


# datetime.fromisoformat on 3.10 only takes 3 or 6 fractional digits.
_FRACTION = re.compile(r"(?<=:\d{2})\.(\d+)")


def _pad_fraction(match: "re.Match[str]") -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_published_date(value: Optional[str]) -> datetime:
    if not value:
        return EPOCH
    iso = _FRACTION.sub(_pad_fraction, value.strip().replace("Z", "+00:00"), count=1)
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        # Some providers send RFC 2822 dates ("Mon, 15 Jan 2024 10:00:00 GMT").
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
