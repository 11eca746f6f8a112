import pytest

from seo_audit.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(robots_timeout=1, sitemap_timeout=1, pagespeed_timeout=1, archive_timeout=1)
