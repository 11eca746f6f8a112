"""
Parse HTML once and extract every SEO-relevant element the section
analyzers read. The result is a plain dict so analyzers stay pure functions
over data.
"""

import json
import logging
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

SKIPPED_HREF_PREFIXES = ("#", "javascript:", "mailto:", "tel:", "data:")


def bare_host(url: str) -> str:
    host = (urlparse(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def _rel_values(tag: Tag) -> list[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [r.lower() for r in rel]


def dom_depth(root: Optional[Tag]) -> int:
    """
    Deepest element nesting below `root`, counting root's children as 1.

    Walks with an explicit stack so pathological nesting cannot hit the
    recursion limit.
    """
    if root is None:
        return 0
    max_depth = 0
    stack = [(child, 1) for child in root.find_all(True, recursive=False)]
    while stack:
        node, depth = stack.pop()
        if depth > max_depth:
            max_depth = depth
        stack.extend((child, depth + 1) for child in node.find_all(True, recursive=False))
    return max_depth


def schema_types(data) -> list[str]:
    """Collect @type values from a JSON-LD payload, following @graph and lists."""
    types = []
    pending = [data]
    while pending:
        item = pending.pop(0)
        if isinstance(item, list):
            pending.extend(item)
        elif isinstance(item, dict):
            t = item.get("@type")
            if isinstance(t, list):
                types.extend(str(v) for v in t if v)
            elif t:
                types.append(str(t))
            if isinstance(item.get("@graph"), list):
                pending.extend(item["@graph"])
    return types


def parse_html(html: str, base_url: Optional[str] = None) -> dict:
    """Parse HTML and extract all SEO-relevant data."""
    soup = BeautifulSoup(html or "", "lxml")

    result = {
        "title": "",
        "title_count": 0,
        "meta_description": "",
        "description_count": 0,
        "meta_keywords": "",
        "meta_robots": None,
        "canonical": None,
        "canonical_count": 0,
        "language": None,
        "h1": [],
        "h2": [],
        "h3": [],
        "h4": [],
        "h5": [],
        "h6": [],
        "heading_levels": [],
        "images": [],
        "links": {"internal": [], "external": []},
        "scripts": [],
        "stylesheets": [],
        "schema_types": [],
        "schema_errors": 0,
        "open_graph": {},
        "twitter_card": {},
        "favicon": None,
        "dom_depth": 0,
    }

    # Language
    html_tag = soup.find("html")
    if html_tag and html_tag.get("lang") is not None:
        result["language"] = html_tag.get("lang").strip()

    # Title (svg <title> elements are not document titles)
    titles = [t for t in soup.find_all("title") if t.find_parent("svg") is None]
    result["title_count"] = len(titles)
    if titles:
        result["title"] = titles[0].get_text(strip=True)

    # Meta tags
    for meta in soup.find_all("meta"):
        name = (meta.get("name") or "").lower()
        prop = (meta.get("property") or "").lower()
        content = (meta.get("content") or "").strip()

        if name == "description":
            result["description_count"] += 1
            if result["description_count"] == 1:
                result["meta_description"] = content
        elif name == "keywords":
            result["meta_keywords"] = content
        elif name == "robots":
            result["meta_robots"] = content

        # Open Graph
        if prop.startswith("og:"):
            result["open_graph"].setdefault(prop[3:], content)
        # Twitter Card (some sites publish these with property=)
        for key in (name, prop):
            if key.startswith("twitter:"):
                result["twitter_card"].setdefault(key[8:], content)

    # Canonical + favicon
    for link in soup.find_all("link"):
        rels = _rel_values(link)
        if "canonical" in rels:
            result["canonical_count"] += 1
            if result["canonical_count"] == 1:
                result["canonical"] = (link.get("href") or "").strip()
        if result["favicon"] is None and any("icon" in r for r in rels):
            result["favicon"] = link.get("href") or ""

    # Headings, in document order
    for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        result[heading.name].append(heading.get_text(" ", strip=True))
        result["heading_levels"].append(int(heading.name[1]))

    # Images
    for img in soup.find_all("img"):
        src = img.get("src", "")
        if base_url and src:
            src = urljoin(base_url, src)
        result["images"].append({"src": src, "alt": img.get("alt")})

    # Links
    page_host = bare_host(base_url) if base_url else ""
    for a in soup.find_all("a", href=True):
        href = a.get("href", "").strip()
        if not href or href.lower().startswith(SKIPPED_HREF_PREFIXES):
            continue
        full_url = urljoin(base_url, href) if base_url else href
        if urlparse(full_url).scheme not in ("http", "https", ""):
            continue
        rels = _rel_values(a)
        link_data = {
            "href": full_url,
            "text": a.get_text(strip=True)[:100],
            "nofollow": "nofollow" in rels,
        }
        host = bare_host(full_url)
        if not host or host == page_host:
            result["links"]["internal"].append(link_data)
        else:
            result["links"]["external"].append(link_data)

    # Scripts
    for script in soup.find_all("script"):
        script_type = (script.get("type") or "").lower()
        if script_type == "application/ld+json":
            raw = script.string if script.string is not None else script.get_text()
            try:
                result["schema_types"].extend(schema_types(json.loads(raw)))
            except (json.JSONDecodeError, TypeError) as e:
                result["schema_errors"] += 1
                logger.debug("Skipping malformed JSON-LD block: %s", e)
            continue
        src = script.get("src")
        if src:
            result["scripts"].append(urljoin(base_url, src) if base_url else src)

    # Stylesheets
    for link in soup.find_all("link"):
        if "stylesheet" in _rel_values(link) and link.get("href"):
            href = link.get("href")
            result["stylesheets"].append(urljoin(base_url, href) if base_url else href)

    result["dom_depth"] = dom_depth(soup.body)

    return result
