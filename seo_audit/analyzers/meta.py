"""Meta tags analyzer: title, description, keywords and duplicate tags."""

from ..models import Duplicates, MetaAnalysis, TextTag

TITLE_RANGE = (30, 60)
DESCRIPTION_RANGE = (120, 160)


def _text_tag(content: str, bounds: tuple[int, int], missing: str, label: str) -> TextTag:
    low, high = bounds
    issues = []
    if not content:
        issues.append(missing)
    elif len(content) < low:
        issues.append(f"{label} too short (< {low} chars)")
    elif len(content) > high:
        issues.append(f"{label} too long (> {high} chars)")

    return TextTag(
        content=content,
        length=len(content),
        is_optimal=low <= len(content) <= high,
        issues=issues,
    )


def _band_points(tag: TextTag) -> int:
    if not tag.content:
        return 0
    return 30 if tag.is_optimal else 15


def analyze(parsed: dict, fetch_result: dict) -> MetaAnalysis:
    title = _text_tag(parsed.get("title") or "", TITLE_RANGE, "Missing title tag", "Title")
    description = _text_tag(
        parsed.get("meta_description") or "", DESCRIPTION_RANGE,
        "Missing meta description", "Description",
    )
    keywords = parsed.get("meta_keywords") or ""

    duplicates = Duplicates(
        title=parsed.get("title_count", 0) > 1,
        description=parsed.get("description_count", 0) > 1,
    )

    issues = title.issues + description.issues
    if duplicates.title:
        issues.append(f"Duplicate title tags ({parsed['title_count']} found)")
    if duplicates.description:
        issues.append(f"Duplicate meta description tags ({parsed['description_count']} found)")

    score = (
        _band_points(title)
        + _band_points(description)
        + (10 if keywords else 5)
        + (15 if not title.issues else 0)
        + (15 if not description.issues else 0)
        - 10 * (duplicates.title + duplicates.description)
    )

    return MetaAnalysis(
        score=max(0, min(100, score)),
        title=title,
        description=description,
        keywords=keywords,
        duplicates=duplicates,
        issues=issues,
    )
