"""
SEO Audit Engine FastAPI backend

Endpoints:
  POST /audit          Run a single-page SEO audit (returns Analysis JSON)
  GET  /health         Health check
"""

import ipaddress
import logging
import os
from contextlib import asynccontextmanager
from typing import Literal
from urllib.parse import urlparse

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, Header, HTTPException, Request
from pydantic import BaseModel

from .config import Settings
from .engine import run_audit
from .fetcher import FetchFailure, normalize_url
from .models import Analysis

load_dotenv()

logger = logging.getLogger(__name__)

BLOCKED_HOSTS = {"localhost", "0.0.0.0"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = Settings.from_env()
    if not settings.has_pagespeed:
        logger.warning("GOOGLE_PAGESPEED_API_KEY not set. Performance data will be estimated locally.")
    if not settings.has_moz:
        logger.info("Moz credentials not set. Domain authority will be estimated.")
    app.state.settings = settings
    app.state.http_client = httpx.AsyncClient(headers={"User-Agent": settings.user_agent})
    yield
    # Shutdown
    await app.state.http_client.aclose()


app = FastAPI(
    title="SEO Audit Engine",
    version="1.0.0",
    lifespan=lifespan,
)


class AuditRequest(BaseModel):
    url: str
    strategy: Literal["mobile", "desktop"] = "mobile"


def is_private_host(hostname: str | None) -> bool:
    if not hostname:
        return True
    hostname = hostname.lower()
    if hostname in BLOCKED_HOSTS or hostname.endswith(".localhost"):
        return True
    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved or ip.is_unspecified


@app.get("/health")
async def health():
    return {"status": "ok", "engine": "seo-audit"}


@app.post("/audit", response_model=Analysis, response_model_by_alias=True)
async def audit(req: AuditRequest, request: Request, x_api_key: str = Header(default="")):
    settings: Settings = request.app.state.settings

    # Auth check
    if settings.api_secret_key and x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    try:
        url = normalize_url(req.url)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # Block private IPs
    if is_private_host(urlparse(url).hostname):
        raise HTTPException(status_code=400, detail="Private/local URLs not allowed")

    try:
        return await run_audit(
            url,
            strategy=req.strategy,
            settings=settings,
            client=request.app.state.http_client,
        )
    except FetchFailure as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Audit of %s failed", url)
        raise HTTPException(status_code=500, detail=f"Audit failed: {str(e)}")


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("seo_audit.main:app", host="0.0.0.0", port=port, reload=True)
