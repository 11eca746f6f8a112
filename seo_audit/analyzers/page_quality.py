"""Page quality analyzer: word count, image alt coverage and H1 usage."""

import math

from ..content import assess_content_quality
from ..models import ContentAnalysis, HeadingsCount, PageQualityAnalysis

MIN_WORDS = 300


def analyze(parsed: dict, fetch_result: dict, content: ContentAnalysis) -> PageQualityAnalysis:
    word_count = content.total_word_count
    images = parsed.get("images", [])
    image_count = len(images)
    images_with_alt = sum(1 for img in images if img.get("alt") is not None)
    images_without_alt = image_count - images_with_alt

    headings = HeadingsCount(**{f"h{i}": len(parsed.get(f"h{i}", [])) for i in range(1, 7)})

    issues = []
    if word_count < MIN_WORDS:
        issues.append(f"Low word count (< {MIN_WORDS} words)")
    if images_without_alt:
        issues.append(f"{images_without_alt} images missing alt text")

    # A missing H1 costs the full allowance, extra H1s only part of it
    if headings.h1 == 0:
        h1_status, h1_points = "missing", 0
        issues.append("No H1 heading found")
    elif headings.h1 > 1:
        h1_status, h1_points = "multiple", 10
        issues.append(f"Multiple H1 headings found ({headings.h1})")
    else:
        h1_status, h1_points = "ok", 25

    if word_count >= MIN_WORDS:
        words_points = 25
    else:
        words_points = math.floor(word_count / MIN_WORDS * 25 + 0.5)

    score = (
        words_points
        + max(0, 25 - images_without_alt * 5)
        + h1_points
        + max(0, 25 - len(issues) * 5)
    )

    return PageQualityAnalysis(
        score=min(100, score),
        word_count=word_count,
        image_count=image_count,
        images_with_alt=images_with_alt,
        images_without_alt=images_without_alt,
        headings_count=headings,
        h1_status=h1_status,
        content=content,
        content_quality=assess_content_quality(content),
        issues=issues,
    )
