"""
Fetch the audited page and auxiliary resources (robots.txt, sitemaps) with
async httpx.

The primary page fetch never retries; errors are reported in the result dict
and turned into FetchFailure by the engine.
"""

import logging
import time
from urllib.parse import urlparse, urlunparse

import httpx

logger = logging.getLogger(__name__)

HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
}


class FetchFailure(Exception):
    """The audited page itself could not be retrieved."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


def normalize_url(url: str) -> str:
    """Infer a missing scheme and give bare hosts a root path."""
    url = (url or "").strip()
    if not url:
        raise ValueError("URL is required")

    if "://" not in url:
        url = f"https://{url}"
    parsed = urlparse(url)

    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Invalid URL scheme: {parsed.scheme}")
    if not parsed.hostname:
        raise ValueError(f"Invalid URL: {url}")

    path = parsed.path or "/"
    return urlunparse((parsed.scheme, parsed.netloc.lower(), path, parsed.params, parsed.query, ""))


def origin_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


async def fetch_page(
    client: httpx.AsyncClient,
    url: str,
    timeout: float = 10.0,
    user_agent: str | None = None,
) -> dict:
    """
    GET the page once and measure it.

    Returns a dict with html, response_time_ms, content_length, headers and
    error (None on success).
    """
    result = {
        "url": url,
        "final_url": url,
        "status_code": None,
        "html": None,
        "headers": {},
        "redirect_chain": [],
        "response_time_ms": 0,
        "content_length": 0,
        "error": None,
    }

    headers = dict(HEADERS)
    if user_agent:
        headers["User-Agent"] = user_agent

    start = time.perf_counter()
    try:
        resp = await client.get(url, headers=headers, timeout=timeout, follow_redirects=True)
    except httpx.TimeoutException:
        result["error"] = f"Timed out after {timeout:g}s"
        return result
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        result["error"] = str(e) or e.__class__.__name__
        return result
    result["response_time_ms"] = int((time.perf_counter() - start) * 1000)

    result["final_url"] = str(resp.url)
    result["status_code"] = resp.status_code
    result["headers"] = dict(resp.headers)
    result["redirect_chain"] = [str(r.url) for r in resp.history]

    if not resp.is_success:
        result["error"] = f"HTTP {resp.status_code}"
        return result

    result["html"] = resp.text
    result["content_length"] = len(resp.content)
    return result


async def fetch_resource(
    client: httpx.AsyncClient,
    url: str,
    timeout: float,
    user_agent: str | None = None,
) -> dict:
    """
    Best-effort GET for robots.txt, sitemaps and similar files.

    Never raises for network trouble; `error` holds the reason instead.
    """
    result = {"url": url, "status_code": None, "text": None, "content": b"", "headers": {}, "error": None}
    try:
        resp = await client.get(
            url,
            headers={"User-Agent": user_agent} if user_agent else None,
            timeout=timeout,
            follow_redirects=True,
        )
    except httpx.TimeoutException:
        result["error"] = f"Timed out after {timeout:g}s"
        logger.info("Timed out fetching %s", url)
        return result
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        result["error"] = str(e) or e.__class__.__name__
        logger.info("Failed to fetch %s: %s", url, result["error"])
        return result

    result["status_code"] = resp.status_code
    result["headers"] = dict(resp.headers)
    if not resp.is_success:
        result["error"] = f"HTTP {resp.status_code}"
        return result

    result["content"] = resp.content
    result["text"] = resp.text
    return result
