"""
Crawlability sub-analyzer: robots.txt, XML sitemaps, canonical tag and the
<html lang> attribute.

Parsing is deliberately forgiving. Malformed robots.txt lines and broken
sitemap XML become issues on the record; parsing carries on past them.
Sitemap indexes are listed, never followed.
"""

import asyncio
import gzip
import logging
import re
from urllib.parse import urlparse

import httpx
from lxml import etree

from .config import Settings
from .fetcher import fetch_resource, origin_of
from .models import (
    CanonicalCheck,
    IndexingQuality,
    LangAttributeCheck,
    RobotsAnalysis,
    SitemapAnalysis,
)

logger = logging.getLogger(__name__)

COMMON_SITEMAP_PATHS = [
    "/sitemap.xml",
    "/sitemap_index.xml",
    "/sitemap-index.xml",
    "/sitemaps.xml",
]

MAX_SITEMAP_URLS = 50_000

LANG_PATTERN = re.compile(r"^[a-z]{2,3}(-[a-z0-9]{2,8})*$", re.I)


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def normalize_for_compare(url: str) -> str:
    parsed = urlparse(url or "")
    host = (parsed.netloc or "").lower()
    return f"{parsed.scheme.lower()}://{host}{parsed.path}".rstrip("/")


# --- robots.txt ---

def parse_robots_txt(content: str, url: str = "") -> RobotsAnalysis:
    """
    Line-oriented robots.txt parse.

    Group directives (Disallow, Allow, Crawl-delay) count only after a
    User-agent line. Everything unexpected is recorded and skipped.
    """
    issues = []
    blocks = []
    allows = []
    user_agents = []
    sitemap_urls = []
    crawl_delay = None
    current_agent = ""

    content = content.removeprefix("\ufeff")
    for line_number, raw in enumerate(content.splitlines(), 1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue

        directive, sep, value = line.partition(":")
        directive = directive.strip().lower()
        value = value.strip()
        if not sep or not directive:
            issues.append(f"Invalid syntax on line {line_number}: {line}")
            continue

        if directive == "user-agent":
            if not value:
                issues.append(f"Empty User-agent on line {line_number}")
                continue
            current_agent = value
            if value not in user_agents:
                user_agents.append(value)

        elif directive in ("disallow", "allow"):
            if not current_agent:
                issues.append(f"{directive.capitalize()} directive without User-agent on line {line_number}")
                continue
            # an empty Disallow means "allow everything" and blocks nothing
            if value:
                (blocks if directive == "disallow" else allows).append(f"{current_agent}: {value}")

        elif directive == "crawl-delay":
            if not current_agent:
                issues.append(f"Crawl-delay directive without User-agent on line {line_number}")
                continue
            try:
                delay = float(value)
            except ValueError:
                issues.append(f"Invalid crawl-delay value on line {line_number}: {value}")
                continue
            crawl_delay = int(delay) if delay.is_integer() else delay

        elif directive == "sitemap":
            if is_valid_url(value):
                sitemap_urls.append(value)
            else:
                issues.append(f"Invalid sitemap URL on line {line_number}: {value}")

        else:
            issues.append(f"Unknown directive on line {line_number}: {directive}")

    return RobotsAnalysis(
        url=url,
        exists=True,
        content=content,
        is_valid=not issues,
        blocks=blocks,
        allows=allows,
        crawl_delay=crawl_delay,
        user_agents=user_agents,
        sitemap_urls=sitemap_urls,
        issues=issues,
    )


async def analyze_robots_txt(client: httpx.AsyncClient, origin: str, settings: Settings) -> RobotsAnalysis:
    robots_url = f"{origin}/robots.txt"
    fetched = await fetch_resource(client, robots_url, settings.robots_timeout, settings.user_agent)
    if fetched["error"]:
        if fetched["status_code"] is not None:
            issue = f"robots.txt not accessible ({fetched['status_code']})"
        else:
            issue = f"Failed to fetch robots.txt: {fetched['error']}"
        return RobotsAnalysis(url=robots_url, exists=False, issues=[issue])
    return parse_robots_txt(fetched["text"] or "", url=robots_url)


# --- sitemaps ---

def _localname(el) -> str:
    return etree.QName(el).localname if isinstance(el.tag, str) else ""


def _namespace(el) -> str:
    return (etree.QName(el).namespace or "") if isinstance(el.tag, str) else ""


def parse_sitemap(url: str, content: bytes | str, last_modified: str | None = None) -> SitemapAnalysis:
    """Classify and count a sitemap or sitemap index document."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    if content[:2] == b"\x1f\x8b":
        try:
            content = gzip.decompress(content)
        except (OSError, EOFError) as e:
            return SitemapAnalysis(
                url=url, exists=True, last_modified=last_modified,
                issues=[f"Failed to decompress sitemap: {e}"],
            )

    issues = []
    strict = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(content.strip(), parser=strict)
    except etree.XMLSyntaxError as e:
        issues.append(f"Malformed sitemap XML: {e}")
        lenient = etree.XMLParser(resolve_entities=False, no_network=True, recover=True)
        try:
            root = etree.fromstring(content.strip(), parser=lenient)
        except etree.XMLSyntaxError:
            root = None

    if root is None:
        issues.append("Failed to parse sitemap XML")
        return SitemapAnalysis(url=url, exists=True, last_modified=last_modified, issues=issues)

    kind = _localname(root)

    if kind == "sitemapindex":
        index_sitemaps = []
        for child in root:
            if _localname(child) != "sitemap":
                continue
            for loc in child:
                if _localname(loc) == "loc":
                    value = (loc.text or "").strip()
                    if is_valid_url(value):
                        index_sitemaps.append(value)
                    else:
                        issues.append(f"Invalid sitemap URL in index: {value}")
        if not index_sitemaps:
            issues.append("No valid sitemaps found in sitemap index")
        return SitemapAnalysis(
            url=url,
            exists=True,
            is_valid=not issues,
            url_count=len(index_sitemaps),
            index_sitemaps=index_sitemaps,
            last_modified=last_modified,
            issues=issues,
        )

    url_count = image_count = video_count = 0
    if kind == "urlset":
        url_count = sum(1 for child in root if _localname(child) == "url")
    else:
        issues.append("Invalid XML sitemap format")

    for el in root.iter():
        name = _localname(el)
        if name == "image" and "sitemap-image" in _namespace(el):
            image_count += 1
        elif name == "video" and "sitemap-video" in _namespace(el):
            video_count += 1

    if kind == "urlset" and url_count == 0:
        issues.append("No URLs found in sitemap")
    if url_count > MAX_SITEMAP_URLS:
        issues.append("Sitemap contains more than 50,000 URLs (recommend splitting)")

    return SitemapAnalysis(
        url=url,
        exists=True,
        is_valid=not issues,
        url_count=url_count,
        image_count=image_count,
        video_count=video_count,
        last_modified=last_modified,
        issues=issues,
    )


async def analyze_sitemap(client: httpx.AsyncClient, sitemap_url: str, settings: Settings) -> SitemapAnalysis:
    fetched = await fetch_resource(client, sitemap_url, settings.sitemap_timeout, settings.user_agent)
    if fetched["error"]:
        if fetched["status_code"] is not None:
            issue = f"Sitemap not accessible ({fetched['status_code']})"
        else:
            issue = f"Failed to fetch sitemap: {fetched['error']}"
        return SitemapAnalysis(url=sitemap_url, exists=False, issues=[issue])

    headers = {k.lower(): v for k, v in fetched["headers"].items()}
    return parse_sitemap(sitemap_url, fetched["content"], headers.get("last-modified"))


async def discover_sitemaps(
    client: httpx.AsyncClient,
    origin: str,
    robots: RobotsAnalysis,
    settings: Settings,
) -> list[SitemapAnalysis]:
    """
    Analyze every sitemap robots.txt lists; if it lists none, probe the
    common locations and keep the first that exists.
    """
    if robots.sitemap_urls:
        return list(await asyncio.gather(
            *(analyze_sitemap(client, u, settings) for u in robots.sitemap_urls)
        ))

    probes = await asyncio.gather(
        *(analyze_sitemap(client, origin + path, settings) for path in COMMON_SITEMAP_PATHS)
    )
    for sitemap in probes:
        if sitemap.exists:
            return [sitemap]
    return []


async def fetch_crawl_files(
    client: httpx.AsyncClient,
    url: str,
    settings: Settings,
) -> tuple[RobotsAnalysis, list[SitemapAnalysis]]:
    origin = origin_of(url)
    robots = await analyze_robots_txt(client, origin, settings)
    sitemaps = await discover_sitemaps(client, origin, robots, settings)
    return robots, sitemaps


# --- page-level checks ---

def analyze_canonical(canonical: str | None, current_url: str) -> CanonicalCheck:
    if canonical is None:
        return CanonicalCheck()
    if not canonical:
        return CanonicalCheck(exists=True)
    return CanonicalCheck(
        exists=True,
        url=canonical,
        is_self=normalize_for_compare(canonical) == normalize_for_compare(current_url),
        is_valid=is_valid_url(canonical),
    )


def analyze_lang_attribute(lang: str | None) -> LangAttributeCheck:
    if not lang:
        return LangAttributeCheck()
    return LangAttributeCheck(exists=True, value=lang, is_valid=bool(LANG_PATTERN.match(lang)))


# --- scoring ---

def calculate_crawlability_score(
    robots: RobotsAnalysis,
    sitemaps: list[SitemapAnalysis],
    canonical: CanonicalCheck,
    lang: LangAttributeCheck,
) -> int:
    score = 0

    # robots.txt: 30
    if robots.exists:
        score += 15
        if robots.is_valid:
            score += 15

    # sitemap: 30
    found = [s for s in sitemaps if s.exists]
    if found:
        score += 15
        if any(s.is_valid for s in found):
            score += 15

    # canonical: 25
    if canonical.exists:
        score += 10
        if canonical.is_valid:
            score += 10
        if canonical.is_self:
            score += 5

    # lang: 15
    if lang.exists:
        score += 10
        if lang.is_valid:
            score += 5

    return min(100, score)


def analyze_indexing_quality(
    robots_exists: bool,
    sitemap_exists: bool,
    has_ssl: bool,
    canonical_exists: bool,
) -> IndexingQuality:
    score = 0
    factors = []
    checks = [
        (robots_exists, "robots.txt exists", "robots.txt missing"),
        (sitemap_exists, "XML sitemap exists", "XML sitemap missing"),
        (has_ssl, "HTTPS enabled", "HTTPS not enabled"),
        (canonical_exists, "Canonical URL implemented", "Canonical URL missing"),
    ]
    for passed, good, bad in checks:
        if passed:
            score += 25
        factors.append(good if passed else bad)

    if score >= 90:
        quality = "excellent"
    elif score >= 70:
        quality = "good"
    elif score >= 50:
        quality = "fair"
    else:
        quality = "poor"

    return IndexingQuality(score=score, quality=quality, factors=factors)
