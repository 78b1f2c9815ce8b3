from news_digest.core.text_cleaner import (
    MIN_CLEAN_LENGTH,
    clean_article_text,
    clean_text,
    extract_after_marker,
)


def test_short_text_is_empty() -> None:
    assert clean_text("short") == ""
    assert clean_text("") == ""
    assert clean_text(None) == ""


def test_floor_applies_after_cleanup() -> None:
    text = "x" * (MIN_CLEAN_LENGTH - 10) + " Subscribe to continue reading."
    assert clean_text(text) == ""


def test_collapses_whitespace(article_body) -> None:
    messy = article_body.replace(" ", "  \n\t ", 5)
    assert clean_text(messy) == article_body


def test_strips_boilerplate_phrases(article_body) -> None:
    raw = (
        "Subscribe to continue reading. "
        + article_body
        + "\n\nFollow us on Twitter for updates. Read more: Five chip stocks to watch."
        + "\n© 2024 Example Media LLC. All rights reserved."
    )
    cleaned = clean_text(raw)
    assert cleaned == article_body


def test_copyright_topic_is_not_stripped() -> None:
    body = (
        "A copyright lawsuit against the startup moved forward on Monday after a federal "
        "judge declined to dismiss the claims brought by a group of authors and publishers."
    )
    assert clean_text(body) == body


def test_marker_extraction_for_marker_source(article_body) -> None:
    raw = (
        "Share Copy Link copied Email Facebook X Reddit LinkedIn Pinterest Flipboard Print "
        + article_body
    )
    assert clean_article_text(raw, "apnews.com") == article_body
    assert "Link copied" in clean_article_text(raw, "example.com")


def test_marker_absent_falls_back_to_whole_text(article_body) -> None:
    assert clean_article_text(article_body, "apnews.com") == article_body
    assert extract_after_marker(article_body, "Link copied") is None


def test_marker_at_end_falls_back(article_body) -> None:
    raw = article_body + " Link copied"
    assert clean_article_text(raw, "apnews.com").startswith("Chipmakers")


def test_share_button_does_not_swallow_following_sentence(article_body) -> None:
    lead = "Nvidia beat estimates by a wide margin this quarter."
    assert clean_text("Share on X " + lead + " " + article_body) == lead + " " + article_body
    assert clean_text("Share this article on Facebook " + article_body) == article_body


def test_read_more_inside_prose_is_kept(article_body) -> None:
    tail = " Investors can read more about the filing in the company's annual report, analysts said."
    assert clean_text(article_body + tail) == article_body + tail


def test_read_more_footer_without_period_is_stripped(article_body) -> None:
    assert clean_text(article_body + " Read next: Five chip stocks to watch") == article_body


def test_follow_prompt_inside_prose_is_kept(article_body) -> None:
    text = article_body + " Analysts who follow the company on Twitter expected the beat."
    assert clean_text(text) == text
