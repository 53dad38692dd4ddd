"""
Content Normalizer

Merges crawled pages into one corpus per language. New languages are
supported by adding substitution rules, not code.
"""

import logging
from typing import Dict, List, Optional, Tuple

from geo_engine.models import CrawledPage, WebsiteContent
from geo_engine.utils.text import collapse_whitespace
from geo_engine.utils.urls import get_host

from .crawler import SiteCrawler

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"

LANGUAGE_SUBSTITUTIONS: Dict[str, List[Tuple[str, str]]] = {
    "de": [("ß", "ss")],
}


def normalize_text(text: str, language: str) -> str:
    normalized = collapse_whitespace(text)
    for old, new in LANGUAGE_SUBSTITUTIONS.get(language.lower(), []):
        normalized = normalized.replace(old, new)
    return normalized


def normalize_content(pages: List[CrawledPage], language: str) -> str:
    """
    Title, headings, body and topics of every page as one string.

    Each page is collapsed to a single line; pages are separated by a
    blank line.
    """
    blocks = []
    for page in pages:
        parts = [page.title, *page.headings, page.content, *page.topics]
        block = normalize_text(" ".join(p for p in parts if p), language)
        if block:
            blocks.append(block)
    return PAGE_SEPARATOR.join(blocks)


def build_website_content(
    website_url: str,
    pages: List[CrawledPage],
    language: str,
) -> WebsiteContent:
    return WebsiteContent(
        domain=get_host(website_url),
        pages=list(pages),
        normalized_content=normalize_content(pages, language),
        language=language,
    )


class ContentScraper:
    """Crawls a site and returns its normalized WebsiteContent."""

    def __init__(self, crawler: SiteCrawler):
        self.crawler = crawler

    async def scrape(
        self,
        website_url: str,
        language: str,
        urls: Optional[List[str]] = None,
    ) -> WebsiteContent:
        """
        Scrape a website.

        Args:
            website_url: Site root
            language: Content language
            urls: Known page URLs (e.g. from the sitemap). When given,
                exactly these pages are fetched instead of crawling.
        """
        if urls:
            pages = await self.crawler.fetch_pages(urls, language=language)
        else:
            pages = await self.crawler.crawl(website_url, language=language)

        content = build_website_content(website_url, pages, language)
        logger.info(
            f"Normalized {len(pages)} pages for {content.domain} "
            f"({len(content.normalized_content)} chars)"
        )
        return content
