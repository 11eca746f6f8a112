from seo_audit.analyzers import crawlability
from seo_audit.models import RobotsAnalysis, SitemapAnalysis
from seo_audit.parser import parse_html
from seo_audit.robots_sitemap import parse_robots_txt

from helpers import FULL_PAGE, make_page

URL = "https://example.com/"


def analyze(html, robots, sitemaps, url=URL):
    return crawlability.analyze(parse_html(html, url), {"final_url": url}, robots, sitemaps)


def good_robots():
    return parse_robots_txt("User-agent: *\nDisallow: /admin\n", url=URL + "robots.txt")


def good_sitemap():
    return SitemapAnalysis(url=URL + "sitemap.xml", exists=True, is_valid=True, url_count=10)


def test_everything_in_place_scores_full_marks():
    result = analyze(FULL_PAGE, good_robots(), [good_sitemap()])

    assert result.score == 100
    assert result.issues == []
    assert result.recommendations == []
    assert result.canonical.is_self is True
    assert result.lang_attribute.value == "en"
    assert result.indexing_quality.score == 100
    assert result.indexing_quality.quality == "excellent"


def test_nothing_in_place_scores_zero():
    html = make_page(lang=None)
    result = analyze(html, RobotsAnalysis(url=URL + "robots.txt"), [])

    assert result.score == 0
    assert result.issues == [
        "robots.txt not found",
        "No sitemap found",
        "Missing canonical URL",
        "Missing lang attribute",
    ]
    assert len(result.recommendations) == len(result.issues)
    assert result.indexing_quality.quality == "poor"
    assert result.indexing_quality.factors == [
        "robots.txt missing",
        "XML sitemap missing",
        "HTTPS enabled",
        "Canonical URL missing",
    ]


def test_partial_credit():
    robots = parse_robots_txt("Disallow: /\n")
    invalid_sitemap = SitemapAnalysis(url=URL + "sitemap.xml", exists=True, is_valid=False)
    html = make_page(head='<link rel="canonical" href="https://example.com/elsewhere">', lang="english")
    result = analyze(html, robots, [invalid_sitemap])

    # robots 15, sitemap 15, canonical 10 + 10, lang 10
    assert result.score == 60
    assert "robots.txt has syntax errors" in result.issues
    assert "1 invalid sitemap(s) found" in result.issues
    assert "Canonical URL points to a different page" in result.issues
    assert "Invalid lang attribute: english" in result.issues


def test_multiple_canonical_tags():
    html = make_page(head=(
        '<link rel="canonical" href="https://example.com/">'
        '<link rel="canonical" href="https://example.com/other">'
    ))
    result = analyze(html, good_robots(), [good_sitemap()])

    assert result.canonical.url == "https://example.com/"
    assert result.issues == ["Multiple canonical tags"]


def test_plain_http_page_loses_indexing_factor():
    result = analyze(FULL_PAGE, good_robots(), [good_sitemap()], url="http://example.com/")

    assert result.indexing_quality.score == 75
    assert result.indexing_quality.quality == "good"
    assert "HTTPS not enabled" in result.indexing_quality.factors
