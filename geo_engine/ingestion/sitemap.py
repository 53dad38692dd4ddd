"""
Sitemap Resolver

Finds the pages of a website to analyze.

Tries, in order:
- fixed sitemap locations (/sitemap.xml, /sitemap_index.xml, /sitemaps/sitemap.xml)
- Sitemap: directives in robots.txt
- same-domain links on the homepage (always includes the homepage)

A sitemap index yields the nested sitemap URLs themselves; they are
not fetched.
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple

from geo_engine.models import SitemapDiscovery
from geo_engine.utils.urls import (
    is_document_url,
    is_same_domain,
    normalize_url,
    resolve_link,
)

from .fetcher import PageFetcher
from .html import extract_links

logger = logging.getLogger(__name__)

SITEMAP_CANDIDATES = (
    "/sitemap.xml",
    "/sitemap_index.xml",
    "/sitemaps/sitemap.xml",
)

MAX_FALLBACK_LINKS = 50

LOC_PATTERN = re.compile(r"<loc>\s*(.*?)\s*</loc>", re.IGNORECASE | re.DOTALL)


def parse_sitemap_xml(xml_content: str) -> Tuple[List[str], bool]:
    """
    Parse a sitemap document.

    Returns:
        (locations, is_index). For a <sitemapindex> the locations are
        the nested sitemap URLs.
    """
    # Remove XML namespace for easier parsing
    stripped = re.sub(r'\sxmlns(:\w+)?="[^"]+"', "", xml_content)

    try:
        root = ET.fromstring(stripped.strip())
    except ET.ParseError as e:
        logger.debug(f"XML parse error, scanning for <loc> tags: {e}")
        is_index = "<sitemapindex" in xml_content.lower()
        return [loc for loc in LOC_PATTERN.findall(xml_content) if loc], is_index

    tag = root.tag.split("}")[-1].lower()
    is_index = tag == "sitemapindex"
    entry = "sitemap" if is_index else "url"

    locations = []
    for elem in root.iter(entry):
        loc = elem.find("loc")
        if loc is not None and loc.text and loc.text.strip():
            locations.append(loc.text.strip())

    return locations, is_index


class SitemapResolver:
    """
    Resolves the page list of a site.

    Usage:
        async with PageFetcher() as fetcher:
            resolver = SitemapResolver(fetcher)
            discovery = await resolver.resolve("https://example.com")
    """

    def __init__(self, fetcher: PageFetcher, timeout: float = 10.0):
        self.fetcher = fetcher
        self.timeout = timeout

    async def resolve(self, base_url: str) -> SitemapDiscovery:
        base = normalize_url(base_url).rstrip("/")

        for path in SITEMAP_CANDIDATES:
            discovery = await self._try_sitemap(f"{base}{path}")
            if discovery:
                return discovery

        robots_sitemap = await self._find_sitemap_in_robots(f"{base}/robots.txt")
        if robots_sitemap:
            discovery = await self._try_sitemap(robots_sitemap)
            if discovery:
                return discovery

        logger.info(f"No sitemap found for {base}, extracting homepage links")
        urls = await self.homepage_links(base_url)
        return SitemapDiscovery(found_sitemap=False, urls=urls)

    async def _try_sitemap(self, sitemap_url: str) -> Optional[SitemapDiscovery]:
        result = await self.fetcher.fetch(sitemap_url, timeout=self.timeout)
        if not result.ok:
            logger.debug(f"Sitemap candidate missed: {sitemap_url}")
            return None

        locations, is_index = parse_sitemap_xml(result.text)
        if not locations:
            logger.debug(f"Sitemap {sitemap_url} has no <loc> entries")
            return None

        kind = "sitemap index" if is_index else "sitemap"
        logger.info(f"Found {kind} at {sitemap_url} with {len(locations)} URLs")
        return SitemapDiscovery(
            found_sitemap=True,
            urls=locations,
            is_index=is_index,
            location=sitemap_url,
        )

    async def _find_sitemap_in_robots(self, robots_url: str) -> Optional[str]:
        """Find sitemap URL from robots.txt."""
        result = await self.fetcher.fetch(robots_url, timeout=self.timeout)
        if not result.ok:
            return None

        # Look for Sitemap: directive
        for line in result.text.splitlines():
            line = line.strip()
            if line.lower().startswith("sitemap:"):
                sitemap_url = line.split(":", 1)[1].strip()
                if sitemap_url.startswith("http"):
                    return sitemap_url
        return None

    async def homepage_links(self, base_url: str) -> List[str]:
        """
        Same-domain links found on the homepage.

        The homepage itself is always the first entry, so the list is
        never empty.
        """
        homepage = normalize_url(base_url)
        urls = [homepage]

        result = await self.fetcher.fetch(homepage, timeout=self.timeout)
        if not result.ok:
            logger.warning(f"Failed to fetch homepage {homepage}: {result.error}")
            return urls

        seen = {homepage}
        for href in extract_links(result.text):
            absolute = resolve_link(homepage, href)
            if not absolute or not is_same_domain(absolute, homepage):
                continue
            if is_document_url(absolute):
                continue

            normalized = normalize_url(absolute)
            if normalized in seen:
                continue
            seen.add(normalized)
            urls.append(normalized)

            if len(urls) > MAX_FALLBACK_LINKS:
                break

        logger.info(f"Extracted {len(urls)} URLs from homepage {homepage}")
        return urls
