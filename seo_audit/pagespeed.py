"""
PageSpeed Insights connector.

Calls the PageSpeed Insights v5 API when a key is configured and maps the
Lighthouse result into Core Web Vitals. Without a key, or when the call
fails, it returns a local estimate built only from the measured response
time and page size, flagged `reliability="estimated"` and `is_success=False`.
"""

import logging

import httpx

from .config import Settings
from .models import CoreWebVitals, Diagnostic, Metric, Opportunity, PageSpeedAnalysis

logger = logging.getLogger(__name__)

API_BASE = "https://www.googleapis.com/pagespeed/v5/runPagespeed"

OPPORTUNITY_AUDITS = [
    "unused-javascript",
    "unused-css-rules",
    "server-response-time",
    "render-blocking-resources",
    "unminified-css",
    "unminified-javascript",
    "modern-image-formats",
    "offscreen-images",
    "uses-optimized-images",
]

DIAGNOSTIC_AUDITS = [
    "dom-size",
    "uses-long-cache-ttl",
    "total-byte-weight",
    "uses-optimized-images",
    "uses-text-compression",
    "uses-responsive-images",
]

IMPACT_ORDER = {"high": 3, "medium": 2, "low": 1}


def category_for(score: int) -> str:
    if score >= 90:
        return "good"
    if score >= 50:
        return "needs-improvement"
    return "poor"


def parse_metric(audit: dict | None) -> Metric:
    if not audit:
        return Metric(value=0, score=0, display_value="N/A", category="poor")
    score = round((audit.get("score") or 0) * 100)
    return Metric(
        value=audit.get("numericValue") or 0,
        score=score,
        display_value=audit.get("displayValue") or "N/A",
        category=category_for(score),
    )


def _format_savings(ms: float) -> str:
    if ms > 1000:
        return f"{ms / 1000:.1f}s"
    return f"{round(ms)}ms"


def extract_opportunities(audits: dict) -> list[Opportunity]:
    opportunities = []
    for audit_id in OPPORTUNITY_AUDITS:
        audit = audits.get(audit_id)
        if not audit or not audit.get("details"):
            continue
        savings = audit["details"].get("overallSavingsMs") or 0
        if savings > 1000:
            impact = "high"
        elif savings > 500:
            impact = "medium"
        else:
            impact = "low"
        opportunities.append(Opportunity(
            title=audit.get("title", audit_id),
            description=audit.get("description", ""),
            potential_savings=_format_savings(savings),
            impact=impact,
        ))
    # stable sort keeps the audit order within one impact level
    opportunities.sort(key=lambda o: IMPACT_ORDER[o.impact], reverse=True)
    return opportunities


def extract_diagnostics(audits: dict) -> list[Diagnostic]:
    diagnostics = []
    for audit_id in DIAGNOSTIC_AUDITS:
        audit = audits.get(audit_id)
        if not audit or audit.get("score") is None or audit["score"] >= 1:
            continue
        score = audit["score"]
        if score < 0.5:
            impact = "high"
        elif score < 0.8:
            impact = "medium"
        else:
            impact = "low"
        diagnostics.append(Diagnostic(
            title=audit.get("title", audit_id),
            description=audit.get("description", ""),
            impact=impact,
        ))
    return diagnostics


def parse_pagespeed_results(data: dict, strategy: str = "mobile") -> PageSpeedAnalysis:
    lighthouse = data["lighthouseResult"]
    audits = lighthouse.get("audits", {})
    categories = lighthouse.get("categories", {})

    vitals = CoreWebVitals(
        lcp=parse_metric(audits.get("largest-contentful-paint")),
        fid=parse_metric(audits.get("max-potential-fid") or audits.get("total-blocking-time")),
        cls=parse_metric(audits.get("cumulative-layout-shift")),
        fcp=parse_metric(audits.get("first-contentful-paint")),
        speed_index=parse_metric(audits.get("speed-index")),
    )

    resources = (audits.get("resource-summary") or {}).get("details", {}).get("items", [])
    performance = categories.get("performance") or {}

    return PageSpeedAnalysis(
        performance_score=round((performance.get("score") or 0) * 100),
        core_web_vitals=vitals,
        opportunities=extract_opportunities(audits),
        diagnostics=extract_diagnostics(audits),
        total_page_size=sum(item.get("transferSize", item.get("size", 0)) or 0 for item in resources),
        total_request_count=sum(item.get("requestCount", 0) or 0 for item in resources),
        load_time=(audits.get("speed-index") or {}).get("numericValue") or 0,
        strategy=strategy,
        reliability="measured",
        is_success=True,
    )


def estimate_score(response_time_ms: float, page_size: int) -> int:
    score = 100
    if response_time_ms > 3000:
        score -= 40
    elif response_time_ms > 1000:
        score -= 20
    elif response_time_ms > 500:
        score -= 10

    if page_size > 3_000_000:
        score -= 20
    elif page_size > 1_000_000:
        score -= 10
    return max(0, score)


def _estimated_metric(value_ms: float, score: int) -> Metric:
    return Metric(
        value=value_ms,
        score=score,
        display_value=f"~{value_ms / 1000:.1f}s",
        category=category_for(score),
    )


def estimate_performance(
    response_time_ms: float,
    page_size: int,
    strategy: str = "mobile",
    error: str = "PageSpeed Insights unavailable",
) -> PageSpeedAnalysis:
    """
    Local stand-in for PageSpeed data.

    Only timing-derived vitals are filled in; FID and CLS cannot be inferred
    from a single HTML response and stay None.
    """
    score = estimate_score(response_time_ms, page_size)
    return PageSpeedAnalysis(
        performance_score=score,
        core_web_vitals=CoreWebVitals(
            lcp=_estimated_metric(response_time_ms * 1.5, score),
            fcp=_estimated_metric(response_time_ms, score),
            speed_index=_estimated_metric(response_time_ms * 1.2, score),
        ),
        opportunities=[Opportunity(
            title="Enable PageSpeed Insights API",
            description="Set GOOGLE_PAGESPEED_API_KEY to get measured lab data",
            potential_savings="Measured data",
            impact="high",
        )],
        diagnostics=[Diagnostic(
            title="Limited performance data",
            description="Estimated from server response time and HTML size only.",
            impact="medium",
        )],
        total_page_size=page_size,
        total_request_count=1,
        load_time=response_time_ms,
        strategy=strategy,
        reliability="estimated",
        is_success=False,
        error=error,
    )


async def analyze_performance(
    client: httpx.AsyncClient,
    url: str,
    settings: Settings,
    strategy: str = "mobile",
    response_time_ms: float = 0,
    page_size: int = 0,
) -> PageSpeedAnalysis:
    """Query PageSpeed Insights, falling back to the local estimate on any failure."""
    if not settings.has_pagespeed:
        return estimate_performance(
            response_time_ms, page_size, strategy,
            error="GOOGLE_PAGESPEED_API_KEY not configured; using local estimate",
        )

    params = {
        "url": url,
        "key": settings.pagespeed_api_key,
        "strategy": strategy,
        "category": "performance",
    }
    try:
        resp = await client.get(API_BASE, params=params, timeout=settings.pagespeed_timeout)
        data = resp.json()
        if isinstance(data, dict) and data.get("error"):
            message = data["error"].get("message") if isinstance(data["error"], dict) else data["error"]
            raise ValueError(f"PageSpeed API error: {message}")
        resp.raise_for_status()
        return parse_pagespeed_results(data, strategy)
    except httpx.TimeoutException:
        error = f"PageSpeed API timed out after {settings.pagespeed_timeout:g}s"
    except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
        error = str(e) or e.__class__.__name__
    logger.warning("PageSpeed analysis failed for %s: %s", url, error)
    return estimate_performance(response_time_ms, page_size, strategy, error=error)
