import re
from typing import Iterable, List, Optional, Set
from urllib.parse import urlparse

from ..logging_config import get_logger
from ..models.news import NewsSource


logger = get_logger("core.source_resolver")


DEFAULT_SOURCES: List[NewsSource] = [
    NewsSource(name="Bloomberg", domain="bloomberg.com"),
    NewsSource(name="Wall Street Journal", domain="wsj.com"),
    NewsSource(name="New York Times", domain="nytimes.com"),
    NewsSource(name="Associated Press", domain="apnews.com"),
]

# At least two dot-separated labels; non-ASCII hosts are checked in IDNA form.
_HOSTNAME = re.compile(
    r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?)+$"
)


def normalize_domain(url: str) -> Optional[str]:
    """Host of ``url`` in lower case with a leading ``www.`` removed.

    Bare hosts such as ``example.com/path`` are accepted. Returns ``None``
    when no valid hostname can be parsed, so ``site:`` queries are never
    built from hosts containing spaces or markup.
    """

    candidate = (url or "").strip()
    if not candidate:
        return None
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    try:
        parsed = urlparse(candidate)
        host = parsed.hostname
        # Touch the port so malformed ports raise here rather than later.
        parsed.port
    except ValueError:
        return None
    if not host:
        return None
    try:
        ascii_host = host.encode("idna").decode("ascii")
    except UnicodeError:
        return None
    if not _HOSTNAME.match(ascii_host):
        return None
    if host.startswith("www."):
        host = host[len("www."):]
    return host or None


def resolve_custom_sources(
    custom_urls: Iterable[str],
    covered_domains: Iterable[str],
) -> List[NewsSource]:
    """Turn user-supplied URLs into new sources, first occurrence wins.

    URLs that cannot be parsed, or whose domain is already covered by a
    default source or an earlier URL, are dropped without error.
    """

    seen: Set[str] = {domain.lower() for domain in covered_domains}
    resolved: List[NewsSource] = []
    for url in custom_urls:
        if not isinstance(url, str):
            logger.info("custom_source_dropped", url=repr(url), reason="not_a_string")
            continue
        domain = normalize_domain(url)
        if domain is None:
            logger.info("custom_source_dropped", url=url, reason="unparseable")
            continue
        if domain in seen:
            logger.debug("custom_source_dropped", url=url, reason="duplicate", domain=domain)
            continue
        seen.add(domain)
        resolved.append(NewsSource(name=domain, domain=domain, url=url.strip()))
    return resolved
