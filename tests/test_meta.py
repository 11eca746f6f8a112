from seo_audit.analyzers import meta
from seo_audit.parser import parse_html

from helpers import make_page

URL = "https://example.com/"


def analyze(html):
    return meta.analyze(parse_html(html, URL), {"final_url": URL})


def test_optimal_title_and_description():
    title = "t" * 45
    description = "d" * 140
    result = analyze(make_page(title=title, description=description))

    assert result.title.is_optimal is True
    assert result.description.is_optimal is True
    assert result.title.issues == []
    assert result.description.issues == []
    assert result.issues == []
    assert result.duplicates.title is False
    assert result.duplicates.description is False
    # 30 + 30 + 5 (no keywords) + 15 + 15
    assert result.score == 95


def test_keywords_complete_the_score():
    html = make_page(
        title="t" * 45,
        description="d" * 140,
        head='<meta name="keywords" content="seo, audit">',
    )
    result = analyze(html)

    assert result.keywords == "seo, audit"
    assert result.score == 100


def test_missing_title_and_description():
    html = "<html><head></head><body><p>Hi</p></body></html>"
    result = analyze(html)

    assert result.title.issues == ["Missing title tag"]
    assert result.description.issues == ["Missing meta description"]
    assert result.score == 5


def test_length_bands():
    result = analyze(make_page(title="Too short", description="d" * 200))

    assert result.title.issues == ["Title too short (< 30 chars)"]
    assert result.description.issues == ["Description too long (> 160 chars)"]
    assert not result.title.is_optimal
    assert result.score == 15 + 15 + 5


def test_duplicate_tags_are_their_own_issue():
    html = (
        "<html><head>"
        f"<title>{'t' * 45}</title><title>{'u' * 45}</title>"
        f'<meta name="description" content="{"d" * 140}">'
        f'<meta name="description" content="{"e" * 140}">'
        "</head><body></body></html>"
    )
    result = analyze(html)

    assert result.duplicates.title is True
    assert result.duplicates.description is True
    assert result.title.issues == []
    assert "Duplicate title tags (2 found)" in result.issues
    assert "Duplicate meta description tags (2 found)" in result.issues
    assert result.title.content == "t" * 45
    assert result.score == 95 - 20


def test_svg_title_is_not_a_duplicate():
    html = make_page(title="t" * 45, body="<svg><title>Icon</title></svg>")
    assert analyze(html).duplicates.title is False
