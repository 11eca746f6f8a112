"""Single-page SEO audit engine."""

from .engine import run_audit
from .fetcher import FetchFailure

__all__ = ["run_audit", "FetchFailure"]
