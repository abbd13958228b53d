# Sitemap — sitemap.xml assembly from static menu pages and content API listings.
# Created: 2026-10-19

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal
from xml.sax.saxutils import escape

from togethertax.api.client import ApiClient
from togethertax.config import API_ENDPOINTS

logger = logging.getLogger(__name__)

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"

ChangeFreq = Literal["always", "hourly", "daily", "weekly", "monthly", "yearly", "never"]

# (path, priority) for the main menu pages; all change weekly.
MAIN_PAGES: list[tuple[str, float]] = [
    ("/business-areas/hierarchical", 0.9),
    ("/experts", 0.9),
    ("/education", 0.8),
    ("/history", 0.8),
    ("/insights", 0.8),
    ("/consultation/apply", 0.7),
]

# (endpoint key, site path prefix, changefreq, priority)
DYNAMIC_SECTIONS: list[tuple[str, str, ChangeFreq, float]] = [
    ("business_areas", "/business-areas", "monthly", 0.7),
    ("members", "/experts", "monthly", 0.7),
    ("insights", "/insights", "weekly", 0.6),
    ("training_seminars", "/education", "weekly", 0.6),
]

LISTING_QUERY = "?page=1&limit=100"


@dataclass(frozen=True)
class SitemapUrl:
    loc: str
    lastmod: str | None = None
    changefreq: ChangeFreq | None = None
    priority: float | None = None


def _render_url(url: SitemapUrl) -> str:
    lines = ["  <url>", f"    <loc>{escape(url.loc)}</loc>"]
    if url.lastmod:
        lines.append(f"    <lastmod>{escape(url.lastmod)}</lastmod>")
    if url.changefreq:
        lines.append(f"    <changefreq>{url.changefreq}</changefreq>")
    if url.priority is not None:
        lines.append(f"    <priority>{url.priority}</priority>")
    lines.append("  </url>")
    return "\n".join(lines)


def generate_sitemap(urls: Iterable[SitemapUrl]) -> str:
    """Render a sitemaps.org ``urlset`` document."""
    entries = "\n".join(_render_url(url) for url in urls)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">\n'
        f"{entries}\n"
        "</urlset>"
    )


def _listing_ids(data: Any) -> list[Any]:
    """Pull item ids out of either a bare list or an ``{"items": [...]}`` page."""
    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        return []
    return [item["id"] for item in data if isinstance(item, dict) and "id" in item]


async def collect_sitemap_urls(client: ApiClient, site_url: str) -> list[SitemapUrl]:
    """Build the full URL list: home, main menu pages, then content detail pages.

    A content listing that fails to load is skipped; the rest of the sitemap
    is still produced.
    """
    site_url = site_url.rstrip("/")
    urls = [SitemapUrl(loc=f"{site_url}/", changefreq="daily", priority=1.0)]

    for path, priority in MAIN_PAGES:
        urls.append(SitemapUrl(loc=f"{site_url}{path}", changefreq="weekly", priority=priority))

    for key, prefix, changefreq, priority in DYNAMIC_SECTIONS:
        result = await client.get(f"{API_ENDPOINTS[key]}{LISTING_QUERY}")
        if not result.ok:
            logger.warning("Sitemap: skipping %s (%s)", key, result.error)
            continue
        for item_id in _listing_ids(result.data):
            urls.append(
                SitemapUrl(
                    loc=f"{site_url}{prefix}/{item_id}",
                    changefreq=changefreq,
                    priority=priority,
                )
            )

    return urls
