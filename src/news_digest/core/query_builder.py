from typing import Callable, Dict, Sequence

from ..models.news import Category, NewsSource


TECH_TERMS = (
    '(technology OR tech OR AI OR "artificial intelligence" OR software OR '
    "startup OR semiconductor OR chips OR cybersecurity OR cloud)"
)
FINANCE_TERMS = (
    '(markets OR stocks OR economy OR earnings OR "interest rates" OR '
    "banking OR investing OR inflation OR bonds OR finance)"
)

CATEGORY_TERMS: Dict[str, str] = {
    "TECH": TECH_TERMS,
    "FINANCE": FINANCE_TERMS,
}

QueryOverride = Callable[[str, str, str], str]


def _path_scoped(path: str) -> QueryOverride:
    def build(domain: str, terms: str, category: str) -> str:
        return f"site:{domain}{path} {terms}"

    return build


def _category_path_scoped(paths: Dict[str, str]) -> QueryOverride:
    def build(domain: str, terms: str, category: str) -> str:
        return f"site:{domain}{paths.get(category, paths['TECH'])} {terms}"

    return build


def _excluding(segment: str) -> QueryOverride:
    def build(domain: str, terms: str, category: str) -> str:
        return f"site:{domain} {terms} -inurl:{segment}"

    return build


# Sites whose article URLs live under a known prefix, or whose search hits
# are dominated by a known non-article section.
DOMAIN_QUERY_OVERRIDES: Dict[str, QueryOverride] = {
    "apnews.com": _path_scoped("/article"),
    "bloomberg.com": _path_scoped("/news/articles"),
    "wsj.com": _category_path_scoped({"TECH": "/tech", "FINANCE": "/finance"}),
    "nytimes.com": _excluding("/section/"),
}


def _default_query(domain: str, terms: str, category: str) -> str:
    return f"site:{domain} {terms}"


def normalize_category(category: object) -> Category:
    if isinstance(category, str) and category.strip().upper() in CATEGORY_TERMS:
        return category.strip().upper()  # type: ignore[return-value]
    return "TECH"


def build_query(source: NewsSource, category: Category | str) -> str:
    """Build a ``site:``-restricted search expression for one source.

    Unknown categories fall back to ``TECH`` and unknown domains to the plain
    ``site:<domain> <terms>`` form.
    """

    key = normalize_category(category)
    terms = CATEGORY_TERMS[key]
    domain = (source.domain or "").strip().lower()
    override = DOMAIN_QUERY_OVERRIDES.get(domain, _default_query)
    return override(domain, terms, key)


def build_search_query(sources: Sequence[NewsSource], query: str) -> str:
    """Free-text query restricted to any of ``sources``."""

    sites = " OR ".join(f"site:{source.domain}" for source in sources)
    if not sites:
        return query.strip()
    return f"({sites}) {query.strip()}"
