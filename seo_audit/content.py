"""
Main-content extraction.

readability-lxml picks the main article subtree. When that yields too little
text, common main-content selectors are tried, and finally the stripped
<body> text is used. Extraction never fails; a poor page simply gets a low
content ratio.
"""

import copy
import logging
import math
import re

from bs4 import BeautifulSoup
from readability import Document
from readability.readability import Unparseable

from .models import ContentAnalysis, ContentQuality

logger = logging.getLogger(__name__)

MIN_CONTENT_CHARS = 200
WORDS_PER_MINUTE = 200

WORD_CHARS = re.compile(r"[a-zA-Z0-9À-ſ一-鿿぀-ゟ゠-ヿ]")

FALLBACK_SELECTORS = [
    "main",
    "article",
    '[role="main"]',
    ".main-content",
    ".content",
    "#content",
    ".post-content",
    ".entry-content",
    ".article-body",
    ".story-body",
    ".post-body",
]
FALLBACK_NOISE = (
    "script, style, noscript, template, nav, header, footer, aside, "
    ".sidebar, .navigation, .menu, .ads, .advertisement, .comments, .related"
)


def count_words(text: str) -> int:
    """Count whitespace-separated tokens holding Latin, digit, CJK or Kana characters."""
    if not text:
        return 0
    return sum(1 for token in text.split() if WORD_CHARS.search(token))


def _squash(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def _readability_text(html: str, url: str = "") -> str:
    """Text of the subtree readability-lxml selects as the article."""
    if not html.strip():
        return ""
    try:
        summary = Document(html, url=url or None).summary(html_partial=True)
    except Unparseable as e:
        logger.debug("Readability could not parse %s: %s", url or "document", e)
        return ""
    return _squash(BeautifulSoup(summary, "lxml").get_text(" "))


def _byline(soup: BeautifulSoup) -> str | None:
    meta = soup.find("meta", attrs={"name": re.compile(r"^author$", re.I)})
    if meta and meta.get("content"):
        return meta["content"].strip()
    el = soup.find(attrs={"rel": "author"}) or soup.find(attrs={"itemprop": "author"})
    if el is not None:
        text = _squash(el.get_text(" "))
        if 0 < len(text) < 100:
            return text
    return None


def _excerpt(soup: BeautifulSoup) -> str | None:
    for attrs in ({"name": "description"}, {"property": "og:description"}):
        meta = soup.find("meta", attrs=attrs)
        if meta and meta.get("content"):
            return meta["content"].strip()
    return None


def _page_title(soup: BeautifulSoup) -> str:
    title = soup.find("title")
    if title and title.get_text(strip=True):
        return title.get_text(strip=True)
    meta = soup.find("meta", attrs={"property": "og:title"})
    return (meta.get("content") or "").strip() if meta else ""


def _all_text(soup: BeautifulSoup) -> str:
    body = copy.copy(soup.body) if soup.body is not None else copy.copy(soup)
    for el in body.find_all(["script", "style", "noscript", "template"]):
        el.decompose()
    return _squash(body.get_text(" "))


def _fallback_text(soup: BeautifulSoup) -> str:
    """Selector-based main-content guess, then stripped <body> text."""
    stripped = copy.copy(soup)
    for el in stripped.select(FALLBACK_NOISE):
        el.decompose()

    main_content = ""
    for selector in FALLBACK_SELECTORS:
        element = stripped.select_one(selector)
        if element is None:
            continue
        text = _squash(element.get_text(" "))
        if len(text) > MIN_CONTENT_CHARS and len(text) > len(main_content):
            main_content = text
            break

    if not main_content:
        body = stripped.body or stripped
        main_content = _squash(body.get_text(" "))
    return main_content


def extract_content(html: str, url: str = "") -> ContentAnalysis:
    """Isolate the page's primary text and measure it against the whole page."""
    soup = BeautifulSoup(html or "", "lxml")
    total_words = count_words(_all_text(soup))
    title = _page_title(soup)
    byline = _byline(soup)
    excerpt = _excerpt(soup)

    main_content = _readability_text(html or "", url)
    if len(main_content) <= MIN_CONTENT_CHARS:
        main_content = _fallback_text(soup)
        byline = None

    main_words = count_words(main_content)
    if excerpt is None and main_content:
        excerpt = main_content[:160] + ("..." if len(main_content) > 160 else "")

    ratio = round(main_words / total_words * 100) if total_words else 0

    return ContentAnalysis(
        main_content_word_count=main_words,
        total_word_count=total_words,
        content_ratio=max(0, min(100, ratio)),
        reading_time=math.ceil(main_words / WORDS_PER_MINUTE),
        main_content=main_content,
        title=title,
        byline=byline,
        excerpt=excerpt,
    )


def assess_content_quality(content: ContentAnalysis) -> ContentQuality:
    issues = []
    recommendations = []

    if content.main_content_word_count < 300:
        issues.append("Content too short (< 300 words)")
        recommendations.append("Add more comprehensive content (aim for 300+ words)")

    if content.content_ratio < 30:
        issues.append("Low content-to-total ratio (too much boilerplate)")
        recommendations.append("Reduce navigation, ads, and sidebar content")

    if content.reading_time < 2:
        issues.append("Very short reading time")
        recommendations.append("Consider adding more detailed information")

    return ContentQuality(
        is_high_quality=not issues,
        issues=issues,
        recommendations=recommendations,
    )
