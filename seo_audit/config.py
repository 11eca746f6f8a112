"""
Runtime settings for the audit engine.

Built once per process from the environment and passed explicitly into
run_audit() and the connectors. Call load_dotenv() before from_env() if a
.env file should be honoured.
"""

import os
from dataclasses import dataclass


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 SEOAuditEngine/1.0"
)


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    pagespeed_api_key: str | None = None
    moz_access_id: str | None = None
    moz_secret_key: str | None = None
    api_secret_key: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    page_timeout: float = 10.0
    robots_timeout: float = 10.0
    sitemap_timeout: float = 15.0
    pagespeed_timeout: float = 30.0
    archive_timeout: float = 5.0
    moz_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            pagespeed_api_key=os.environ.get("GOOGLE_PAGESPEED_API_KEY") or None,
            moz_access_id=os.environ.get("MOZ_ACCESS_ID") or None,
            moz_secret_key=os.environ.get("MOZ_SECRET_KEY") or None,
            api_secret_key=os.environ.get("API_SECRET_KEY", ""),
            user_agent=os.environ.get("SEO_AUDIT_USER_AGENT") or DEFAULT_USER_AGENT,
            page_timeout=_float_env("SEO_AUDIT_PAGE_TIMEOUT", 10.0),
            robots_timeout=_float_env("SEO_AUDIT_ROBOTS_TIMEOUT", 10.0),
            sitemap_timeout=_float_env("SEO_AUDIT_SITEMAP_TIMEOUT", 15.0),
            pagespeed_timeout=_float_env("SEO_AUDIT_PAGESPEED_TIMEOUT", 30.0),
            archive_timeout=_float_env("SEO_AUDIT_ARCHIVE_TIMEOUT", 5.0),
            moz_timeout=_float_env("SEO_AUDIT_MOZ_TIMEOUT", 10.0),
        )

    @property
    def has_pagespeed(self) -> bool:
        return bool(self.pagespeed_api_key)

    @property
    def has_moz(self) -> bool:
        return bool(self.moz_access_id and self.moz_secret_key)
