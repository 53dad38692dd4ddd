"""
Ingestion - sitemap discovery, crawling and content normalization.
"""

from .fetcher import FetchResult, PageFetcher
from .sitemap import SitemapResolver, parse_sitemap_xml
from .crawler import SiteCrawler, parse_page
from .content import ContentScraper, build_website_content, normalize_content

__all__ = [
    "FetchResult",
    "PageFetcher",
    "SitemapResolver",
    "parse_sitemap_xml",
    "SiteCrawler",
    "parse_page",
    "ContentScraper",
    "build_website_content",
    "normalize_content",
]
