"""
Score aggregator: builds the final Analysis from section results.

The overall score is the unweighted mean of the section scores. It is a
computed field on Analysis, so it always reflects the sections it holds.
"""

from datetime import datetime, timezone

from .models import Analysis, Sections


def aggregate(sections: Sections) -> float:
    """Overall score: the unweighted mean of the section scores."""
    return sections.mean_score()


def build_results(
    sections: Sections,
    url: str,
    strategy: str,
    duration_ms: int,
    timestamp: datetime | None = None,
) -> Analysis:
    """Aggregate section results into final audit output."""
    timestamp = timestamp or datetime.now(timezone.utc)
    return Analysis(
        url=url,
        timestamp=timestamp.isoformat().replace("+00:00", "Z"),
        strategy=strategy,
        audit_duration=duration_ms,
        sections=sections,
    )
