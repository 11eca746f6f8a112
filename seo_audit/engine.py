"""
Main audit engine: orchestrates fetch, parse, analyze, score.

Only the primary page fetch can stop an audit. Once the HTML is in hand, the
local analyzers run in a worker thread while robots.txt/sitemaps, PageSpeed
Insights and the domain lookup proceed concurrently, each under its own
timeout and each degrading to a fallback on failure.
"""

import asyncio
import logging
import time

import httpx

from .config import Settings
from .content import extract_content
from .fetcher import FetchFailure, fetch_page, normalize_url
from .models import Sections
from .pagespeed import analyze_performance
from .domain_authority import estimate_domain_authority
from .parser import parse_html
from .robots_sitemap import fetch_crawl_files
from .scorer import build_results
from .analyzers import (
    crawlability,
    external_factors,
    link_structure,
    meta,
    page_quality,
    page_structure,
    performance,
)

logger = logging.getLogger(__name__)

STRATEGIES = ("mobile", "desktop")


def analyze_local(html: str, fetch_result: dict) -> dict:
    """Run the analyzers that only need the fetched HTML."""
    page_url = fetch_result["final_url"]
    parsed = parse_html(html, base_url=page_url)
    content = extract_content(html, page_url)
    return {
        "parsed": parsed,
        "meta": meta.analyze(parsed, fetch_result),
        "page_quality": page_quality.analyze(parsed, fetch_result, content),
        "link_structure": link_structure.analyze(parsed, fetch_result),
        "page_structure": page_structure.analyze(parsed, fetch_result),
    }


async def run_audit(
    url: str,
    strategy: str = "mobile",
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    on_progress=None,
):
    """
    Run a full SEO audit on the given URL.

    Args:
        url: The URL to audit; a missing scheme defaults to https
        strategy: PageSpeed strategy, "mobile" or "desktop"
        settings: Connector keys and timeouts; read from the environment if omitted
        client: Shared httpx client owned by the caller; a private one is
            created and closed when omitted
        on_progress: Optional async callback(step: str, progress: int)

    Returns:
        Analysis

    Raises:
        ValueError: the URL or strategy is invalid
        FetchFailure: the page itself could not be fetched
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Invalid strategy: {strategy}")
    url = normalize_url(url)
    settings = settings or Settings.from_env()

    if client is None:
        async with httpx.AsyncClient(headers={"User-Agent": settings.user_agent}) as own_client:
            return await _audit(own_client, url, strategy, settings, on_progress)
    return await _audit(client, url, strategy, settings, on_progress)


async def _audit(client, url, strategy, settings, on_progress):
    start = time.time()

    # Phase 1: Fetch
    if on_progress:
        await on_progress("Fetching page...", 5)

    fetch_result = await fetch_page(client, url, settings.page_timeout, settings.user_agent)
    if fetch_result["error"]:
        logger.warning("Audit of %s aborted: %s", url, fetch_result["error"])
        raise FetchFailure(url, fetch_result["error"], fetch_result["status_code"])

    page_url = fetch_result["final_url"]

    if on_progress:
        await on_progress("Analyzing page...", 25)

    # Phase 2: local analyzers and auxiliary lookups side by side
    local, (robots, sitemaps), page_speed, domain = await asyncio.gather(
        asyncio.to_thread(analyze_local, fetch_result["html"], fetch_result),
        fetch_crawl_files(client, page_url, settings),
        analyze_performance(
            client,
            page_url,
            settings,
            strategy=strategy,
            response_time_ms=fetch_result["response_time_ms"],
            page_size=fetch_result["content_length"],
        ),
        estimate_domain_authority(client, page_url, settings),
    )

    if on_progress:
        await on_progress("Generating report...", 95)

    # Phase 3: sections that combine local and remote data
    parsed = local["parsed"]
    sections = Sections(
        meta=local["meta"],
        page_quality=local["page_quality"],
        link_structure=local["link_structure"],
        page_structure=local["page_structure"],
        performance=performance.analyze(parsed, fetch_result, page_speed),
        crawlability=crawlability.analyze(parsed, fetch_result, robots, sitemaps),
        external_factors=external_factors.analyze(parsed, fetch_result, domain),
    )

    duration_ms = int((time.time() - start) * 1000)
    results = build_results(sections=sections, url=page_url, strategy=strategy, duration_ms=duration_ms)

    if on_progress:
        await on_progress("Complete", 100)

    logger.info("Audited %s: overall score %.1f", page_url, results.overall_score)
    return results
