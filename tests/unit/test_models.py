from datetime import datetime, timezone

import pytest

from news_digest.models.news import EPOCH, Article, SourceResult, parse_published_date


@pytest.mark.parametrize(
    "value",
    [
        "2024-01-15T10:00:00.1Z",
        "2024-01-15T10:00:00.12345+00:00",
        "2024-01-15T10:00:00.123456789Z",
    ],
)
def test_odd_length_fractional_seconds_parse(value) -> None:
    parsed = parse_published_date(value)
    assert parsed.replace(microsecond=0) == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


def test_fraction_is_padded_not_shifted() -> None:
    assert parse_published_date("2024-01-15T10:00:00.1Z").microsecond == 100000


def test_rfc2822_and_naive_dates() -> None:
    expected = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
    assert parse_published_date("Mon, 15 Jan 2024 10:00:00 GMT") == expected
    assert parse_published_date("2024-01-15T10:00:00") == expected


def test_missing_or_garbage_dates_sort_as_epoch() -> None:
    assert parse_published_date(None) == EPOCH
    assert parse_published_date("") == EPOCH
    assert parse_published_date("yesterday") == EPOCH


def test_failed_source_result_cannot_carry_articles() -> None:
    result = SourceResult.failure("Bloomberg", "Search provider timed out")
    assert not result.ok
    assert result.articles == []
    with pytest.raises(ValueError):
        SourceResult(source="Bloomberg", articles=[_article()], error="boom")


def _article() -> Article:
    return Article(
        id="a",
        title="Title long enough",
        url="https://example.com/a",
        text="body",
        summary="summary",
        published_date="2024-01-15T10:00:00Z",
    )
