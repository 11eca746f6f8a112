"""Page structure analyzer: DOM depth and heading hierarchy."""

from ..models import HeadingStructure, PageStructureAnalysis

MAX_DOM_DEPTH = 15


def has_proper_hierarchy(levels: list[int]) -> bool:
    """True when no heading jumps more than one level deeper than the previous one."""
    last = 0
    for level in levels:
        if level > last + 1:
            return False
        last = level
    return True


def analyze(parsed: dict, fetch_result: dict) -> PageStructureAnalysis:
    h1_text = parsed.get("h1", [])
    h1_count = len(h1_text)
    depth = parsed.get("dom_depth", 0)
    proper = has_proper_hierarchy(parsed.get("heading_levels", []))

    issues = []
    if h1_count == 0:
        issues.append("Missing H1 heading")
    if h1_count > 1:
        issues.append("Multiple H1 headings")
    if depth > MAX_DOM_DEPTH:
        issues.append(f"DOM too deep (> {MAX_DOM_DEPTH} levels)")
    if not proper:
        issues.append("Improper heading hierarchy")

    depth_points = 25 if depth <= MAX_DOM_DEPTH else max(0, 25 - (depth - MAX_DOM_DEPTH) * 2)

    score = (
        (30 if h1_count == 1 else 0)
        + depth_points
        + (25 if proper else 0)
        + max(0, 20 - len(issues) * 5)
    )

    return PageStructureAnalysis(
        score=min(100, score),
        dom_depth=depth,
        heading_structure=HeadingStructure(
            h1_count=h1_count,
            h1_text=h1_text,
            missing_h1=h1_count == 0,
            proper_hierarchy=proper,
        ),
        issues=issues,
    )
