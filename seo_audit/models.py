"""
Report record types.

Every section is a closed pydantic model with snake_case attributes and
camelCase JSON aliases, so `Analysis.model_dump(by_alias=True)` is the wire
format returned to callers.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


Score = Annotated[int, Field(ge=0, le=100)]
Impact = Literal["high", "medium", "low"]
Category = Literal["good", "needs-improvement", "poor"]
Reliability = Literal["measured", "estimated"]
Strategy = Literal["mobile", "desktop"]


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Content extraction ---

class ContentAnalysis(Record):
    main_content_word_count: int = 0
    total_word_count: int = 0
    content_ratio: int = Field(default=0, ge=0, le=100)
    reading_time: int = 0
    main_content: str = ""
    title: str = ""
    byline: str | None = None
    excerpt: str | None = None


class ContentQuality(Record):
    is_high_quality: bool
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


# --- Meta ---

class TextTag(Record):
    content: str = ""
    length: int = 0
    is_optimal: bool = False
    issues: list[str] = Field(default_factory=list)


class Duplicates(Record):
    title: bool = False
    description: bool = False


class MetaAnalysis(Record):
    score: Score
    title: TextTag
    description: TextTag
    keywords: str = ""
    duplicates: Duplicates
    issues: list[str] = Field(default_factory=list)


# --- Page quality ---

class HeadingsCount(Record):
    h1: int = 0
    h2: int = 0
    h3: int = 0
    h4: int = 0
    h5: int = 0
    h6: int = 0


class PageQualityAnalysis(Record):
    score: Score
    word_count: int
    image_count: int
    images_with_alt: int
    images_without_alt: int
    headings_count: HeadingsCount
    h1_status: Literal["ok", "missing", "multiple"]
    content: ContentAnalysis
    content_quality: ContentQuality
    issues: list[str] = Field(default_factory=list)


# --- Links ---

class LinkStructureAnalysis(Record):
    score: Score
    internal_links: int
    external_links: int
    broken_links: list[str] = Field(default_factory=list)
    no_follow_links: int = 0
    issues: list[str] = Field(default_factory=list)


# --- Page structure ---

class HeadingStructure(Record):
    h1_count: int
    h1_text: list[str] = Field(default_factory=list)
    missing_h1: bool
    proper_hierarchy: bool


class PageStructureAnalysis(Record):
    score: Score
    dom_depth: int
    heading_structure: HeadingStructure
    issues: list[str] = Field(default_factory=list)


# --- Performance ---

class Metric(Record):
    value: float = 0
    score: int = Field(default=0, ge=0, le=100)
    display_value: str = "N/A"
    category: Category = "poor"


class CoreWebVitals(Record):
    lcp: Metric | None = None
    fid: Metric | None = None
    cls: Metric | None = None
    fcp: Metric | None = None
    speed_index: Metric | None = None


class Opportunity(Record):
    title: str
    description: str = ""
    potential_savings: str
    impact: Impact


class Diagnostic(Record):
    title: str
    description: str = ""
    impact: Impact


class PageSpeedAnalysis(Record):
    performance_score: int = Field(ge=0, le=100)
    core_web_vitals: CoreWebVitals
    opportunities: list[Opportunity] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    total_page_size: int = 0
    total_request_count: int = 0
    load_time: float = 0
    strategy: Strategy = "mobile"
    reliability: Reliability
    is_success: bool
    error: str | None = None


class AssetsCount(Record):
    css: int = 0
    js: int = 0
    images: int = 0
    total: int = 0


class PerformanceAnalysis(Record):
    score: Score
    response_time: int
    page_size: int
    assets_count: AssetsCount
    local_score: Score
    page_speed: PageSpeedAnalysis
    issues: list[str] = Field(default_factory=list)


# --- Crawlability ---

class RobotsAnalysis(Record):
    url: str = ""
    exists: bool = False
    content: str = ""
    is_valid: bool = False
    blocks: list[str] = Field(default_factory=list)
    allows: list[str] = Field(default_factory=list)
    crawl_delay: float | None = None
    user_agents: list[str] = Field(default_factory=list)
    sitemap_urls: list[str] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)


class SitemapAnalysis(Record):
    url: str = ""
    exists: bool = False
    is_valid: bool = False
    url_count: int = 0
    index_sitemaps: list[str] = Field(default_factory=list)
    image_count: int = 0
    video_count: int = 0
    last_modified: str | None = None
    issues: list[str] = Field(default_factory=list)


class CanonicalCheck(Record):
    exists: bool = False
    url: str | None = None
    is_self: bool = False
    is_valid: bool = False


class LangAttributeCheck(Record):
    exists: bool = False
    value: str | None = None
    is_valid: bool = False


class IndexingQuality(Record):
    score: Score
    quality: Literal["excellent", "good", "fair", "poor"]
    factors: list[str] = Field(default_factory=list)


class CrawlabilityAnalysis(Record):
    score: Score
    robots: RobotsAnalysis
    sitemaps: list[SitemapAnalysis] = Field(default_factory=list)
    canonical: CanonicalCheck
    lang_attribute: LangAttributeCheck
    indexing_quality: IndexingQuality
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


# --- External factors ---

class Favicon(Record):
    exists: bool = False
    url: str | None = None


class OpenGraph(Record):
    title: str | None = None
    description: str | None = None
    image: str | None = None
    url: str | None = None
    type: str | None = None


class TwitterCard(Record):
    card: str | None = None
    title: str | None = None
    description: str | None = None
    image: str | None = None


class SchemaMarkup(Record):
    exists: bool = False
    types: list[str] = Field(default_factory=list)
    invalid_blocks: int = 0


class TrustFactors(Record):
    domain_extension: str
    is_secure: bool
    has_www: bool
    domain_length: int


class DomainAuthorityAnalysis(Record):
    estimated_da: int = Field(ge=0, le=100, alias="estimatedDA")
    domain_age: int | None = None
    has_ssl: bool = Field(alias="hasSSL")
    trust_factors: TrustFactors
    reliability: Literal["estimated", "api_based"] = "estimated"
    recommendations: list[str] = Field(default_factory=list)


class ExternalFactorsAnalysis(Record):
    score: Score
    https: bool
    favicon: Favicon
    open_graph: OpenGraph
    twitter_card: TwitterCard
    schema_markup: SchemaMarkup
    domain_authority: DomainAuthorityAnalysis | None = None
    issues: list[str] = Field(default_factory=list)


# --- Report ---

class Sections(Record):
    meta: MetaAnalysis
    page_quality: PageQualityAnalysis
    link_structure: LinkStructureAnalysis
    page_structure: PageStructureAnalysis
    performance: PerformanceAnalysis
    crawlability: CrawlabilityAnalysis
    external_factors: ExternalFactorsAnalysis

    def scores(self) -> list[int]:
        return [getattr(self, name).score for name in type(self).model_fields]

    def mean_score(self) -> float:
        """Unweighted mean of the section scores, each already within [0, 100]."""
        scores = self.scores()
        return sum(scores) / len(scores) if scores else 0.0


class Analysis(Record):
    url: str
    timestamp: str
    strategy: Strategy = "mobile"
    audit_duration: int = 0
    sections: Sections

    @computed_field(alias="overallScore")
    @property
    def overall_score(self) -> float:
        return self.sections.mean_score()
