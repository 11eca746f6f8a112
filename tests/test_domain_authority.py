import asyncio
from datetime import datetime, timezone

import httpx

from seo_audit.config import Settings
from seo_audit.domain_authority import (
    MOZ_URL_METRICS,
    WAYBACK_API,
    age_points,
    calculate_estimated_da,
    estimate_domain_authority,
    lookup_domain_age,
    trust_factors,
    years_since,
)

from helpers import make_client


def wayback(timestamp):
    return (200, {"archived_snapshots": {"closest": {"available": True, "timestamp": timestamp}}})


def test_trust_factors():
    factors = trust_factors("https://www.example.com/page")

    assert factors.domain_extension == "com"
    assert factors.is_secure is True
    assert factors.has_www is True
    assert factors.domain_length == len("example.com")


def test_age_points():
    assert age_points(None) == 5
    assert age_points(0) == 5
    assert age_points(1) == 10
    assert age_points(3) == 15
    assert age_points(7) == 20
    assert age_points(25) == 30


def test_estimated_da_formula():
    factors = trust_factors("https://www.example.com/")
    # age 30 + https 20 + .com 15 + length 11 -> 7 + www 5
    assert calculate_estimated_da(12, factors) == 77

    insecure = trust_factors("http://a-very-long-domain-name.xyz/")
    # 5 - 10 + 5 + 2
    assert calculate_estimated_da(None, insecure) == 2


def test_years_since():
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert years_since("20050315000000", now) == 19
    assert years_since("garbage", now) is None


async def test_domain_age_from_wayback():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json={"archived_snapshots": {"closest": {"timestamp": "20050315000000"}}})

    async with make_client({WAYBACK_API: handler}) as client:
        age = await lookup_domain_age(client, "example.com")

    assert seen == {"url": "example.com", "timestamp": "19960101"}
    assert age >= 10


async def test_domain_age_unknown_on_failure():
    async with make_client({WAYBACK_API: httpx.ConnectError("down")}) as client:
        assert await lookup_domain_age(client, "example.com") is None

    async with make_client({WAYBACK_API: (200, {"archived_snapshots": {}})}) as client:
        assert await lookup_domain_age(client, "example.com") is None


async def test_estimate_without_moz(settings):
    async with make_client({WAYBACK_API: wayback("20050315000000")}) as client:
        result = await estimate_domain_authority(client, "https://example.com/", settings)

    assert result.reliability == "estimated"
    assert result.domain_age >= 10
    assert result.has_ssl is True
    # 30 + 20 + 15 + 7
    assert result.estimated_da == 72


async def test_unknown_age_is_flagged(settings):
    async with make_client({}) as client:
        result = await estimate_domain_authority(client, "http://example.com/", settings)

    assert result.domain_age is None
    assert "Implement HTTPS for better trust and rankings" in result.recommendations
    assert any("could not be determined" in r for r in result.recommendations)


async def test_moz_result_is_api_based():
    settings = Settings(moz_access_id="id", moz_secret_key="secret")
    routes = {
        WAYBACK_API: wayback("20150101000000"),
        MOZ_URL_METRICS: (200, {"results": [{"domain_authority": 64}]}),
    }
    async with make_client(routes) as client:
        result = await estimate_domain_authority(client, "https://example.com/", settings)

    assert result.reliability == "api_based"
    assert result.estimated_da == 64


async def test_moz_failure_falls_back_to_estimate():
    settings = Settings(moz_access_id="id", moz_secret_key="secret")
    routes = {WAYBACK_API: wayback("20150101000000"), MOZ_URL_METRICS: (401, {"error": "unauthorized"})}
    async with make_client(routes) as client:
        result = await estimate_domain_authority(client, "https://example.com/", settings)

    assert result.reliability == "estimated"


async def test_domain_age_unknown_on_unexpected_payload():
    async with make_client({WAYBACK_API: (200, {"archived_snapshots": {"closest": ["20050315000000"]}})}) as client:
        assert await lookup_domain_age(client, "example.com") is None

    async with make_client({WAYBACK_API: (200, {"archived_snapshots": {"closest": {"timestamp": 2005}}})}) as client:
        assert await lookup_domain_age(client, "example.com") is None

    async with make_client({WAYBACK_API: (200, ["not", "an", "object"])}) as client:
        assert await lookup_domain_age(client, "example.com") is None


async def test_moz_request_uses_configured_timeout():
    seen = {}

    def moz(request):
        seen["timeout"] = request.extensions["timeout"]
        return httpx.Response(200, json={"results": [{"domain_authority": 40}]})

    settings = Settings(moz_access_id="id", moz_secret_key="secret", moz_timeout=3)
    routes = {WAYBACK_API: wayback("20150101000000"), MOZ_URL_METRICS: moz}
    async with make_client(routes) as client:
        result = await estimate_domain_authority(client, "https://example.com/", settings)

    assert result.estimated_da == 40
    assert seen["timeout"]["read"] == 3


async def test_wayback_and_moz_run_concurrently():
    both_started = asyncio.Event()
    started = []

    class Transport(httpx.AsyncBaseTransport):
        async def handle_async_request(self, request):
            started.append(request.url.host)
            if len(started) == 2:
                both_started.set()
            await asyncio.wait_for(both_started.wait(), timeout=1)
            if request.url.host == "archive.org":
                return httpx.Response(200, json={"archived_snapshots": {}})
            return httpx.Response(200, json={"results": [{"domain_authority": 51}]})

    settings = Settings(moz_access_id="id", moz_secret_key="secret")
    async with httpx.AsyncClient(transport=Transport()) as client:
        result = await estimate_domain_authority(client, "https://example.com/", settings)

    assert sorted(started) == ["archive.org", "lsapi.seomoz.com"]
    assert result.reliability == "api_based"
    assert result.estimated_da == 51
