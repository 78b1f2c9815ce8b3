"""Article body normalization.

Provider text arrives with page chrome mixed into the body: paywall and
newsletter prompts, share bars, related-link lists and copyright lines.
``clean_article_text`` strips a fixed, ordered list of those phrases and
returns an empty string when what is left is too short to be useful.
"""

import re
from typing import Dict, List, Pattern

from ..logging_config import get_logger


logger = get_logger("core.text_cleaner")

MIN_CLEAN_LENGTH = 100

# Footer chrome that only counts as boilerplate when it opens a sentence.
_SENTENCE_START = r"(?:^|(?<=[.!?]))\s*"
_NETWORKS = r"(?:Facebook|Twitter|X|LinkedIn|Reddit)"

# Applied in order, after whitespace has been collapsed to single spaces.
BOILERPLATE_PATTERNS: List[Pattern[str]] = [
    re.compile(r"Subscribe (?:now )?to (?:continue|keep) reading[^.]*\.?", re.IGNORECASE),
    re.compile(r"This (?:article|content|story) is (?:only )?(?:for|available to) (?:paid )?subscribers(?: only)?\.?", re.IGNORECASE),
    re.compile(r"You have reached (?:your|the) (?:limit of )?free articles?(?: limit)?[^.]*\.?", re.IGNORECASE),
    re.compile(r"Already (?:a subscriber|have an account)\?\s*(?:Sign|Log) in\.?", re.IGNORECASE),
    re.compile(r"(?:Sign up|Subscribe) (?:for|to) (?:our|the) [\w\s-]{0,40}newsletters?[^.]*\.?", re.IGNORECASE),
    re.compile(r"Advertisement(?: Skip to (?:main )?content)?", re.IGNORECASE),
    re.compile(rf"\bShare (?:this (?:article|story)(?: on {_NETWORKS})?|on {_NETWORKS})\b:?"),
    re.compile(
        _SENTENCE_START
        + r"Follow (?:us|[\w ]{1,30}) on (?:Twitter|X|Facebook|LinkedIn|Instagram|Threads)\b[^.]*(?:\.|$)"
    ),
    re.compile(_SENTENCE_START + r"Read (?:more|next)(?::| at| on| about)[^.]*(?:\.|$)"),
    re.compile(r"\bRelated (?:Articles|Stories|Coverage|Content|Topics)?:[^.]*\.?", re.IGNORECASE),
    re.compile(r"(?:©|\bCopyright\s*(?:©|\([cC]\))?)\s*\d{4}[^.]*\.?"),
    re.compile(r"All rights reserved\.?", re.IGNORECASE),
]

# Providers whose text carries navigation before a marker; the article body
# starts right after the first occurrence of the marker.
CONTENT_START_MARKERS: Dict[str, str] = {
    "apnews.com": "Link copied",
}

# Remaining share-bar buttons between the marker and the first sentence.
_SHARE_BAR_TAIL = re.compile(
    r"^\s*(?:(?:Email|Facebook|X|Twitter|Reddit|LinkedIn|Pinterest|Flipboard|Print)\s+){2,}"
)

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def clean_text(raw_text: str | None) -> str:
    """Collapse whitespace, strip boilerplate phrases and trim.

    Returns ``""`` when fewer than ``MIN_CLEAN_LENGTH`` characters survive;
    callers treat that as "no usable content".
    """

    if not raw_text:
        return ""
    text = collapse_whitespace(raw_text)
    for pattern in BOILERPLATE_PATTERNS:
        text = pattern.sub(" ", text)
    text = collapse_whitespace(text)
    if len(text) < MIN_CLEAN_LENGTH:
        return ""
    return text


def extract_after_marker(raw_text: str, marker: str) -> str | None:
    index = raw_text.find(marker)
    if index < 0:
        return None
    remainder = raw_text[index + len(marker):]
    return remainder if remainder.strip() else None


def clean_article_text(raw_text: str | None, domain: str | None = None) -> str:
    """Clean provider text, isolating the body first for marker-bearing sources."""

    if not raw_text:
        return ""
    marker = CONTENT_START_MARKERS.get(domain or "")
    if marker:
        body = extract_after_marker(raw_text, marker)
        if body is not None:
            cleaned = clean_text(_SHARE_BAR_TAIL.sub("", body))
            if cleaned:
                return cleaned
            logger.debug("marker_extraction_too_short", domain=domain)
    return clean_text(raw_text)
