"""
Performance analyzer.

The local heuristic scores response time, HTML size and asset counts. When
PageSpeed Insights returned measured data, its performance score becomes the
section score and the heuristic is kept as `local_score` for diagnosis.
"""

from ..models import AssetsCount, PageSpeedAnalysis, PerformanceAnalysis

VITAL_LABELS = {
    "lcp": "Largest Contentful Paint",
    "fid": "First Input Delay",
    "cls": "Cumulative Layout Shift",
    "fcp": "First Contentful Paint",
    "speed_index": "Speed Index",
}


def _tier(value: float, best: float, ok: float) -> int:
    if value <= best:
        return 25
    if value <= ok:
        return 15
    return 5


def local_score(response_time: float, page_size: int, css: int, js: int) -> int:
    return min(100, (
        _tier(response_time, 1000, 3000)
        + _tier(page_size, 512 * 1024, 1024 * 1024)
        + _tier(css, 3, 5)
        + _tier(js, 3, 5)
    ))


def analyze(parsed: dict, fetch_result: dict, page_speed: PageSpeedAnalysis) -> PerformanceAnalysis:
    response_time = fetch_result.get("response_time_ms", 0)
    page_size = fetch_result.get("content_length", 0)
    css = len(parsed.get("stylesheets", []))
    js = len(parsed.get("scripts", []))
    images = len(parsed.get("images", []))

    issues = []
    if response_time > 3000:
        issues.append("Slow response time (> 3s)")
    if page_size > 1024 * 1024:
        issues.append("Large page size (> 1MB)")
    if css > 5:
        issues.append("Too many CSS files")
    if js > 5:
        issues.append("Too many JS files")

    heuristic = local_score(response_time, page_size, css, js)
    score = heuristic

    if page_speed.reliability == "measured" and page_speed.is_success:
        score = page_speed.performance_score
        for key, label in VITAL_LABELS.items():
            metric = getattr(page_speed.core_web_vitals, key)
            if metric is not None and metric.category == "poor":
                issues.append(f"Poor {label} ({metric.display_value})")
    else:
        issues.append("Performance estimated locally (PageSpeed Insights data unavailable)")

    return PerformanceAnalysis(
        score=max(0, min(100, score)),
        response_time=response_time,
        page_size=page_size,
        assets_count=AssetsCount(css=css, js=js, images=images, total=css + js + images),
        local_score=heuristic,
        page_speed=page_speed,
        issues=issues,
    )
