"""
Domain trust connector.

Produces a domain-authority-like number from cheap, local signals plus an
opportunistic Wayback Machine age lookup. The result is always labelled
`reliability="estimated"` unless the Moz Links API answers, which only
happens when MOZ_ACCESS_ID / MOZ_SECRET_KEY are configured.
"""

import asyncio
import logging
from datetime import datetime, timezone
from urllib.parse import urlparse

import httpx

from .config import Settings
from .models import DomainAuthorityAnalysis, TrustFactors

logger = logging.getLogger(__name__)

WAYBACK_API = "https://archive.org/wayback/available"
MOZ_URL_METRICS = "https://lsapi.seomoz.com/v2/url_metrics"

TRUSTED_TLDS = {"com", "org", "edu", "gov"}
COMMON_TLDS = {"net", "info"}


def registered_domain(url: str) -> str:
    host = (urlparse(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def trust_factors(url: str) -> TrustFactors:
    parsed = urlparse(url)
    hostname = (parsed.hostname or "").lower()
    domain = registered_domain(url)
    return TrustFactors(
        domain_extension=domain.rsplit(".", 1)[-1] if "." in domain else "",
        is_secure=parsed.scheme == "https",
        has_www=hostname.startswith("www."),
        domain_length=len(domain),
    )


def age_points(domain_age: int | None) -> int:
    if domain_age is None:
        return 5
    if domain_age >= 10:
        return 30
    if domain_age >= 5:
        return 20
    if domain_age >= 2:
        return 15
    if domain_age >= 1:
        return 10
    return 5


def calculate_estimated_da(domain_age: int | None, factors: TrustFactors) -> int:
    score = age_points(domain_age)

    if factors.is_secure:
        score += 20
    else:
        score -= 10

    extension = factors.domain_extension.lower()
    if extension in TRUSTED_TLDS:
        score += 15
    elif extension in COMMON_TLDS:
        score += 10
    else:
        score += 5

    if factors.domain_length <= 8:
        score += 10
    elif factors.domain_length <= 12:
        score += 7
    elif factors.domain_length <= 15:
        score += 5
    else:
        score += 2

    if factors.has_www:
        score += 5

    return max(0, min(100, score))


def years_since(timestamp: str, now: datetime | None = None) -> int | None:
    """Whole years elapsed since a Wayback `YYYYMMDD...` timestamp."""
    try:
        then = datetime.strptime(timestamp[:8], "%Y%m%d").replace(tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None
    now = now or datetime.now(timezone.utc)
    return max(0, int((now - then).days / 365.25))


async def lookup_domain_age(client: httpx.AsyncClient, domain: str, timeout: float = 5.0) -> int | None:
    """
    Approximate domain age from the earliest Wayback snapshot.

    Any failure means "age unknown" (None).
    """
    try:
        resp = await client.get(
            WAYBACK_API,
            params={"url": domain, "timestamp": "19960101"},
            timeout=timeout,
        )
        resp.raise_for_status()
        closest = resp.json().get("archived_snapshots", {}).get("closest") or {}
        timestamp = closest.get("timestamp") if isinstance(closest, dict) else None
    except (httpx.HTTPError, ValueError, AttributeError) as e:
        logger.info("Wayback lookup failed for %s: %s", domain, e)
        return None

    return years_since(timestamp) if isinstance(timestamp, str) else None


async def fetch_moz_authority(client: httpx.AsyncClient, domain: str, settings: Settings) -> int | None:
    """Domain Authority from the Moz Links API, or None when unavailable."""
    if not settings.has_moz:
        return None
    try:
        resp = await client.post(
            MOZ_URL_METRICS,
            json={"targets": [domain]},
            auth=(settings.moz_access_id, settings.moz_secret_key),
            timeout=settings.moz_timeout,
        )
        resp.raise_for_status()
        results = resp.json().get("results") or []
        value = results[0].get("domain_authority") if results else None
    except (httpx.HTTPError, ValueError, AttributeError, IndexError) as e:
        logger.warning("Moz API failed for %s: %s", domain, e)
        return None
    return int(value) if isinstance(value, (int, float)) else None


def _recommendations(domain_age: int | None, factors: TrustFactors) -> list[str]:
    recommendations = []
    if not factors.is_secure:
        recommendations.append("Implement HTTPS for better trust and rankings")
    if domain_age is None:
        recommendations.append("Domain age could not be determined; the estimate assumes a new domain")
    elif domain_age < 1:
        recommendations.append("Domain is very new - build authority over time with quality content")
    if factors.domain_length > 15:
        recommendations.append("Consider a shorter, more memorable domain name for better branding")
    return recommendations


async def estimate_domain_authority(
    client: httpx.AsyncClient,
    url: str,
    settings: Settings,
) -> DomainAuthorityAnalysis:
    domain = registered_domain(url)
    factors = trust_factors(url)
    domain_age, moz_da = await asyncio.gather(
        lookup_domain_age(client, domain, settings.archive_timeout),
        fetch_moz_authority(client, domain, settings),
    )
    if moz_da is not None:
        return DomainAuthorityAnalysis(
            estimated_da=max(0, min(100, moz_da)),
            domain_age=domain_age,
            has_ssl=factors.is_secure,
            trust_factors=factors,
            reliability="api_based",
            recommendations=_recommendations(domain_age, factors),
        )

    return DomainAuthorityAnalysis(
        estimated_da=calculate_estimated_da(domain_age, factors),
        domain_age=domain_age,
        has_ssl=factors.is_secure,
        trust_factors=factors,
        reliability="estimated",
        recommendations=_recommendations(domain_age, factors),
    )
