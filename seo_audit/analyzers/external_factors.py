"""External factors analyzer: HTTPS, favicon, social tags and structured data."""

from urllib.parse import urljoin

from ..models import (
    DomainAuthorityAnalysis,
    ExternalFactorsAnalysis,
    Favicon,
    OpenGraph,
    SchemaMarkup,
    TwitterCard,
)


def analyze(
    parsed: dict,
    fetch_result: dict,
    domain_authority: DomainAuthorityAnalysis | None = None,
) -> ExternalFactorsAnalysis:
    page_url = fetch_result.get("final_url") or fetch_result.get("url", "")
    is_https = page_url.startswith("https://")

    favicon_href = parsed.get("favicon")
    favicon = Favicon(
        exists=favicon_href is not None,
        url=urljoin(page_url, favicon_href) if favicon_href else None,
    )

    og = parsed.get("open_graph", {})
    open_graph = OpenGraph(**{key: og.get(key) or None for key in ("title", "description", "image", "url", "type")})

    tc = parsed.get("twitter_card", {})
    twitter_card = TwitterCard(**{key: tc.get(key) or None for key in ("card", "title", "description", "image")})

    types = list(dict.fromkeys(parsed.get("schema_types", [])))
    schema = SchemaMarkup(exists=bool(types), types=types, invalid_blocks=parsed.get("schema_errors", 0))

    issues = []
    if not is_https:
        issues.append("Not using HTTPS")
    if not favicon.exists:
        issues.append("Missing favicon")
    if not open_graph.title:
        issues.append("Missing Open Graph title")
    if not open_graph.description:
        issues.append("Missing Open Graph description")
    if not twitter_card.card:
        issues.append("Missing Twitter Card")
    if not schema.exists:
        issues.append("No structured data found")
    if schema.invalid_blocks:
        issues.append(f"{schema.invalid_blocks} JSON-LD block(s) could not be parsed")

    score = (
        (20 if is_https else 0)
        + (15 if favicon.exists else 0)
        + (20 if open_graph.title and open_graph.description else 10)
        + (15 if twitter_card.card else 0)
        + (15 if schema.exists else 0)
        + (15 if len(issues) <= 2 else 0)
    )

    return ExternalFactorsAnalysis(
        score=min(100, score),
        https=is_https,
        favicon=favicon,
        open_graph=open_graph,
        twitter_card=twitter_card,
        schema_markup=schema,
        domain_authority=domain_authority,
        issues=issues,
    )
