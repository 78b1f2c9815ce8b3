"""Decide which raw search hits are real, on-topic articles.

The rule set is data: an ordered list of named rejection rules, a table of
provider boilerplate markers, and a table of per-domain topic gates. Adding
a source or a rule means adding an entry, not touching the aggregator.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, NamedTuple, Optional, Pattern, Sequence, Tuple
from urllib.parse import urlparse

from ..models.news import Category, NewsSource, RawSearchResult
from .query_builder import normalize_category
from .text_cleaner import clean_article_text


MIN_BODY_LENGTH = 200
MIN_TITLE_LENGTH = 20
MAX_ARTICLES_PER_SOURCE = 6


@dataclass(frozen=True)
class Candidate:
    result: RawSearchResult
    source: NewsSource
    category: str
    cleaned_text: str

    @property
    def title(self) -> str:
        return (self.result.title or "").strip()


class Rule(NamedTuple):
    name: str
    rejects: Callable[[Candidate], bool]


# Navigation and section-front titles that search providers index as pages.
SECTION_HEADER_PATTERNS: List[Pattern[str]] = [
    re.compile(r"^latest(?: news| headlines| stories| updates)?$", re.IGNORECASE),
    re.compile(r"^top (?:news|stories|headlines)$", re.IGNORECASE),
    re.compile(r"^breaking news$", re.IGNORECASE),
    re.compile(
        r"^(?:tech|technology|business|markets?|finance|economy|world|politics|science|"
        r"personal finance|deals|ai)(?: news)?(?: (?:and|&) (?:analysis|updates|insights|headlines))?$",
        re.IGNORECASE,
    ),
    re.compile(r"^(?:home|homepage|news|video|videos|podcasts?|opinion|newsletters?)$", re.IGNORECASE),
    re.compile(r"^(?:page|part) \d+$", re.IGNORECASE),
    re.compile(r"^(?:subscribe|sign in|log in|register)\b", re.IGNORECASE),
    re.compile(r"\s-\s*AP News$", re.IGNORECASE),
    re.compile(r"^[\w &]+ news,? (?:headlines|updates)(?: and [\w ]+)?$", re.IGNORECASE),
]


def _letters(title: str) -> List[str]:
    return [ch for ch in title if ch.isalpha()]


def is_section_header(title: str | None) -> bool:
    """True when ``title`` looks like site chrome rather than a headline."""

    if not title:
        return True
    stripped = title.strip()
    if len(stripped) < MIN_TITLE_LENGTH:
        return True
    letters = _letters(stripped)
    if not letters:
        return True
    if all(ch.isupper() for ch in letters):
        return True
    return any(pattern.search(stripped) for pattern in SECTION_HEADER_PATTERNS)


# Text that only appears on a provider's paywall or sales pages.
PROVIDER_BOILERPLATE: Dict[str, Tuple[str, ...]] = {
    "bloomberg.com": (
        "request a demo",
        "bloomberg terminal learn more",
        "connecting decision makers to a dynamic network",
        "you need to enable javascript",
    ),
}


class TopicGate(NamedTuple):
    path_segments: Tuple[str, ...]
    keywords: Pattern[str]

    def matches(self, result: RawSearchResult) -> bool:
        path = urlparse(result.url).path.lower()
        if any(segment in path for segment in self.path_segments):
            return True
        return bool(self.keywords.search(result.title or ""))


TECH_KEYWORDS = re.compile(
    r"\b(?:tech(?:nology)?|AI|A\.I\.|artificial intelligence|software|chips?|semiconductors?|"
    r"apple|google|alphabet|microsoft|amazon|meta|nvidia|openai|tesla|startups?|"
    r"cyber\w*|cloud|robot\w*|quantum|data cent(?:er|re)s?|smartphones?|iphone)\b",
    re.IGNORECASE,
)
FINANCE_KEYWORDS = re.compile(
    r"\b(?:stocks?|markets?|bonds?|yields?|fed|federal reserve|rates?|inflation|earnings|"
    r"econom(?:y|ic|ics)|bank(?:s|ing)?|investors?|ipo|dollar|treasur(?:y|ies)|crypto|"
    r"bitcoin|oil|gdp|recession|tariffs?|funds?|deals?)\b",
    re.IGNORECASE,
)

TOPIC_GATES: Dict[str, Dict[str, TopicGate]] = {
    "bloomberg.com": {
        "TECH": TopicGate(
            ("/technology", "/tech", "/ai/", "/cybersecurity", "/hyperdrive"),
            TECH_KEYWORDS,
        ),
        "FINANCE": TopicGate(
            ("/markets", "/economics", "/deals", "/wealth", "/personal-finance", "/crypto"),
            FINANCE_KEYWORDS,
        ),
    },
}


def _missing_metadata(candidate: Candidate) -> bool:
    return not candidate.title or not candidate.result.published_date


def _section_header(candidate: Candidate) -> bool:
    return is_section_header(candidate.title)


def _thin_body(candidate: Candidate) -> bool:
    return len(candidate.cleaned_text) < MIN_BODY_LENGTH


def _provider_boilerplate(candidate: Candidate) -> bool:
    markers = PROVIDER_BOILERPLATE.get(candidate.source.domain)
    if not markers:
        return False
    text = (candidate.result.text or "").lower()
    return any(marker in text for marker in markers)


def _off_topic(candidate: Candidate) -> bool:
    gates = TOPIC_GATES.get(candidate.source.domain)
    if not gates:
        return False
    gate = gates.get(candidate.category, gates.get("TECH"))
    return gate is not None and not gate.matches(candidate.result)


RULES: List[Rule] = [
    Rule("missing_metadata", _missing_metadata),
    Rule("section_header", _section_header),
    Rule("thin_body", _thin_body),
    Rule("provider_boilerplate", _provider_boilerplate),
    Rule("off_topic", _off_topic),
]


def _candidate(result: RawSearchResult, source: NewsSource, category: str) -> Candidate:
    return Candidate(
        result=result,
        source=source,
        category=normalize_category(category),
        cleaned_text=clean_article_text(result.text, source.domain),
    )


def rejection_reason(
    result: RawSearchResult, source: NewsSource, category: Category | str
) -> Optional[str]:
    """Name of the first rule that rejects ``result``, or ``None`` if it is kept."""

    try:
        candidate = _candidate(result, source, category)
        for rule in RULES:
            if rule.rejects(candidate):
                return rule.name
    except Exception:  # noqa: BLE001
        return "unclassifiable"
    return None


def is_relevant(result: RawSearchResult, source: NewsSource, category: Category | str) -> bool:
    return rejection_reason(result, source, category) is None


def select_relevant(
    results: Sequence[RawSearchResult],
    source: NewsSource,
    category: Category | str,
    limit: int = MAX_ARTICLES_PER_SOURCE,
) -> Tuple[List[RawSearchResult], Counter]:
    """Filter, sort newest first, and truncate a source's search hits.

    Returns the kept results and a count of rejections per rule name.
    """

    kept: List[RawSearchResult] = []
    rejected: Counter = Counter()
    for result in results:
        reason = rejection_reason(result, source, category)
        if reason is None:
            kept.append(result)
        else:
            rejected[reason] += 1
    kept.sort(key=lambda r: r.published_at(), reverse=True)
    return kept[: max(limit, 0)], rejected
