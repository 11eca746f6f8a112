import httpx
import pytest

from seo_audit.config import Settings
from seo_audit.pagespeed import (
    API_BASE,
    analyze_performance,
    category_for,
    estimate_performance,
    extract_diagnostics,
    extract_opportunities,
    parse_metric,
    parse_pagespeed_results,
)

from helpers import make_client

URL = "https://example.com/"

LIGHTHOUSE = {
    "lighthouseResult": {
        "categories": {"performance": {"score": 0.87}},
        "audits": {
            "largest-contentful-paint": {"score": 0.95, "numericValue": 1800, "displayValue": "1.8 s"},
            "max-potential-fid": {"score": 0.6, "numericValue": 180, "displayValue": "180 ms"},
            "cumulative-layout-shift": {"score": 0.3, "numericValue": 0.31, "displayValue": "0.31"},
            "first-contentful-paint": {"score": 1, "numericValue": 900, "displayValue": "0.9 s"},
            "speed-index": {"score": 0.9, "numericValue": 2100, "displayValue": "2.1 s"},
            "unused-javascript": {
                "title": "Reduce unused JavaScript", "description": "",
                "details": {"overallSavingsMs": 300},
            },
            "render-blocking-resources": {
                "title": "Eliminate render-blocking resources", "description": "",
                "details": {"overallSavingsMs": 1500},
            },
            "offscreen-images": {
                "title": "Defer offscreen images", "description": "",
                "details": {"overallSavingsMs": 700},
            },
            "dom-size": {"title": "Avoid an excessive DOM size", "score": 0.4},
            "uses-long-cache-ttl": {"title": "Cache policy", "score": None},
            "uses-text-compression": {"title": "Enable text compression", "score": 1},
            "resource-summary": {"details": {"items": [
                {"resourceType": "total", "transferSize": 51200, "requestCount": 12},
            ]}},
        },
    },
}


@pytest.mark.parametrize("score, category", [(90, "good"), (89, "needs-improvement"), (50, "needs-improvement"), (49, "poor")])
def test_category_boundaries(score, category):
    assert category_for(score) == category


def test_missing_metric_is_poor():
    metric = parse_metric(None)
    assert metric.display_value == "N/A"
    assert metric.category == "poor"


def test_parse_pagespeed_results():
    result = parse_pagespeed_results(LIGHTHOUSE, "desktop")

    assert result.performance_score == 87
    assert result.reliability == "measured"
    assert result.is_success is True
    assert result.strategy == "desktop"
    assert result.core_web_vitals.lcp.category == "good"
    assert result.core_web_vitals.fid.category == "needs-improvement"
    assert result.core_web_vitals.cls.category == "poor"
    assert result.core_web_vitals.speed_index.value == 2100
    assert result.total_page_size == 51200
    assert result.total_request_count == 12
    assert result.load_time == 2100


def test_opportunities_are_sorted_by_impact():
    opportunities = extract_opportunities(LIGHTHOUSE["lighthouseResult"]["audits"])

    assert [o.impact for o in opportunities] == ["high", "medium", "low"]
    assert opportunities[0].title == "Eliminate render-blocking resources"
    assert opportunities[0].potential_savings == "1.5s"
    assert opportunities[2].potential_savings == "300ms"


def test_diagnostics_skip_passed_and_unscored_audits():
    diagnostics = extract_diagnostics(LIGHTHOUSE["lighthouseResult"]["audits"])

    assert [(d.title, d.impact) for d in diagnostics] == [("Avoid an excessive DOM size", "high")]


def test_estimate_does_not_invent_fid_or_cls():
    result = estimate_performance(800, 50_000, "mobile", error="down")

    assert result.reliability == "estimated"
    assert result.is_success is False
    assert result.error == "down"
    assert result.performance_score == 90
    assert result.core_web_vitals.fid is None
    assert result.core_web_vitals.cls is None
    assert result.core_web_vitals.lcp.value == 1200
    assert result.core_web_vitals.fcp.value == 800


async def test_without_api_key_falls_back_to_estimate(settings):
    async with make_client({}) as client:
        result = await analyze_performance(client, URL, settings, "mobile", 400, 10_000)

    assert result.reliability == "estimated"
    assert result.is_success is False
    assert "GOOGLE_PAGESPEED_API_KEY" in result.error


async def test_measured_results_with_api_key():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json=LIGHTHOUSE)

    settings = Settings(pagespeed_api_key="k")
    async with make_client({API_BASE: handler}) as client:
        result = await analyze_performance(client, URL, settings, "desktop", 400, 10_000)

    assert seen["url"] == URL
    assert seen["strategy"] == "desktop"
    assert seen["key"] == "k"
    assert result.reliability == "measured"
    assert result.performance_score == 87


async def test_api_error_falls_back_to_estimate():
    settings = Settings(pagespeed_api_key="k")
    body = {"error": {"code": 500, "message": "Lighthouse returned error"}}
    async with make_client({API_BASE: (500, body)}) as client:
        result = await analyze_performance(client, URL, settings, "mobile", 400, 10_000)

    assert result.reliability == "estimated"
    assert result.is_success is False
    assert "Lighthouse returned error" in result.error


async def test_api_timeout_falls_back_to_estimate():
    settings = Settings(pagespeed_api_key="k", pagespeed_timeout=2)
    async with make_client({API_BASE: httpx.ReadTimeout("slow")}) as client:
        result = await analyze_performance(client, URL, settings, "mobile", 400, 10_000)

    assert result.reliability == "estimated"
    assert result.error == "PageSpeed API timed out after 2s"
