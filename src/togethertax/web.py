# Web — FastAPI app serving the dynamic sitemap.
# Created: 2026-10-19

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Response

from togethertax.api.client import ApiClient, close_api_client, get_api_client
from togethertax.config import Settings, get_settings
from togethertax.sitemap import collect_sitemap_urls, generate_sitemap

logger = logging.getLogger(__name__)

SITEMAP_CACHE_CONTROL = "public, s-maxage=3600, stale-while-revalidate=86400"

router = APIRouter(tags=["SEO"])


async def get_client() -> ApiClient:
    """Process-wide content API client, so all requests share one refresh state."""
    return get_api_client()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await close_api_client()


@router.get("/sitemap.xml", response_class=Response)
async def sitemap_xml(
    client: ApiClient = Depends(get_client),
    settings: Settings = Depends(get_settings),
):
    """Dynamic sitemap covering menu pages and published content."""
    urls = await collect_sitemap_urls(client, settings.site_url)
    logger.debug("Serving sitemap with %d urls", len(urls))
    return Response(
        content=generate_sitemap(urls),
        media_type="text/xml",
        headers={"Cache-Control": SITEMAP_CACHE_CONTROL},
    )


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="TOGETHER TAX",
        description="Server-side endpoints for the TOGETHER TAX website.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app
