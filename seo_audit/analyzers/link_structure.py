"""
Link structure analyzer: internal vs external links and nofollow usage.

Link reachability is not verified here. Callers that check links themselves
can pass the failures in as `broken_links`; otherwise the list stays empty.
"""

import math

from ..models import LinkStructureAnalysis

MIN_INTERNAL_LINKS = 3


def analyze(parsed: dict, fetch_result: dict, broken_links: list[str] | None = None) -> LinkStructureAnalysis:
    links = parsed.get("links", {})
    internal = links.get("internal", [])
    external = links.get("external", [])
    broken = list(broken_links or [])
    no_follow = sum(1 for link in internal + external if link.get("nofollow"))

    issues = []
    if len(internal) < MIN_INTERNAL_LINKS:
        issues.append(f"Few internal links (< {MIN_INTERNAL_LINKS})")
    if not external:
        issues.append("No external links found")
    if broken:
        issues.append(f"{len(broken)} broken links found")

    if len(internal) >= MIN_INTERNAL_LINKS:
        internal_points = 30
    else:
        internal_points = math.floor(len(internal) / MIN_INTERNAL_LINKS * 30 + 0.5)

    score = (
        internal_points
        + (20 if external else 0)
        + max(0, 30 - len(broken) * 10)
        + max(0, 20 - len(issues) * 5)
    )

    return LinkStructureAnalysis(
        score=min(100, score),
        internal_links=len(internal),
        external_links=len(external),
        broken_links=broken,
        no_follow_links=no_follow,
        issues=issues,
    )
