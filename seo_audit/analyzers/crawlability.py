"""Crawlability analyzer: robots.txt, sitemaps, canonical and lang checks."""

from ..models import CrawlabilityAnalysis, RobotsAnalysis, SitemapAnalysis
from ..robots_sitemap import (
    analyze_canonical,
    analyze_indexing_quality,
    analyze_lang_attribute,
    calculate_crawlability_score,
)


def analyze(
    parsed: dict,
    fetch_result: dict,
    robots: RobotsAnalysis,
    sitemaps: list[SitemapAnalysis],
) -> CrawlabilityAnalysis:
    page_url = fetch_result.get("final_url") or fetch_result.get("url", "")
    canonical = analyze_canonical(parsed.get("canonical"), page_url)
    lang = analyze_lang_attribute(parsed.get("language"))

    issues = []
    recommendations = []

    def issue(text, recommendation):
        issues.append(text)
        recommendations.append(recommendation)

    if not robots.exists:
        issue("robots.txt not found", "Create a robots.txt file to guide search engine crawling")
    elif not robots.is_valid:
        issue("robots.txt has syntax errors", "Fix robots.txt syntax errors")

    found = [s for s in sitemaps if s.exists]
    if not found:
        issue("No sitemap found", "Create and submit an XML sitemap")
    else:
        invalid = [s for s in found if not s.is_valid]
        if invalid:
            issue(f"{len(invalid)} invalid sitemap(s) found", "Fix sitemap XML validation errors")

    if not canonical.exists:
        issue("Missing canonical URL", "Add canonical URL to avoid duplicate content issues")
    elif not canonical.is_valid:
        issue("Invalid canonical URL", "Use an absolute http(s) URL in the canonical tag")
    elif not canonical.is_self:
        issue("Canonical URL points to a different page",
              "Make sure the canonical URL is intended to consolidate this page")
    if parsed.get("canonical_count", 0) > 1:
        issue("Multiple canonical tags", "Keep a single canonical tag per page")

    if not lang.exists:
        issue("Missing lang attribute", "Add lang attribute to <html> tag for better accessibility")
    elif not lang.is_valid:
        issue(f"Invalid lang attribute: {lang.value}", "Use a BCP 47 language code such as 'en' or 'en-US'")

    return CrawlabilityAnalysis(
        score=calculate_crawlability_score(robots, sitemaps, canonical, lang),
        robots=robots,
        sitemaps=sitemaps,
        canonical=canonical,
        lang_attribute=lang,
        indexing_quality=analyze_indexing_quality(
            robots.exists,
            bool(found),
            page_url.startswith("https://"),
            canonical.exists,
        ),
        issues=issues,
        recommendations=recommendations,
    )
