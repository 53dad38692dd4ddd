"""
Site Crawler

Depth- and page-bounded, same-domain, depth-first traversal. Pages are
fetched one at a time; a failed fetch is logged and the page omitted.
"""

import logging
from typing import List, Optional, Set

from geo_engine.models import CrawledPage
from geo_engine.utils.config import PipelineConfig
from geo_engine.utils.text import extract_entities, extract_topics
from geo_engine.utils.urls import (
    is_document_url,
    is_same_domain,
    normalize_url,
    resolve_link,
)

from .fetcher import PageFetcher
from .html import extract_body_text, extract_headings, extract_links, extract_title

logger = logging.getLogger(__name__)


def parse_page(url: str, html: str, language: str = "en") -> CrawledPage:
    """Build a CrawledPage from raw HTML."""
    content = extract_body_text(html)
    return CrawledPage(
        url=url,
        title=extract_title(html),
        headings=extract_headings(html),
        content=content,
        topics=extract_topics(content),
        entities=extract_entities(content),
        language=language,
    )


class SiteCrawler:
    """
    Crawls a website into CrawledPage records.

    Usage:
        async with PageFetcher(config.user_agent, config.timeout) as fetcher:
            crawler = SiteCrawler(fetcher, config)
            pages = await crawler.crawl("https://example.com", language="en")
    """

    def __init__(self, fetcher: PageFetcher, config: Optional[PipelineConfig] = None):
        self.fetcher = fetcher
        self.config = config or PipelineConfig()
        self._visited: Set[str] = set()
        self._pages: List[CrawledPage] = []
        self._root = ""
        self._language = "en"

    async def crawl(self, start_url: str, language: str = "en") -> List[CrawledPage]:
        """Depth-first crawl from start_url."""
        self._visited = set()
        self._pages = []
        self._root = start_url
        self._language = language

        await self._crawl_page(start_url, 0)

        logger.info(
            f"Crawled {len(self._pages)} pages from {start_url} "
            f"({len(self._visited)} URLs visited)"
        )
        return list(self._pages)

    async def _crawl_page(self, url: str, depth: int):
        if depth > self.config.max_depth:
            return
        if len(self._pages) >= self.config.max_pages:
            return

        normalized = normalize_url(url)
        if normalized in self._visited:
            return
        self._visited.add(normalized)

        result = await self.fetcher.fetch(url, timeout=self.config.timeout)
        if not result.ok:
            logger.warning(f"Skipping {url}: {result.error}")
            return

        self._pages.append(parse_page(url, result.text, self._language))

        if depth >= self.config.max_depth:
            return

        for link in self._same_domain_links(url, result.text):
            if len(self._pages) >= self.config.max_pages:
                break
            await self._crawl_page(link, depth + 1)

    def _same_domain_links(self, page_url: str, html: str) -> List[str]:
        links = []
        for href in extract_links(html):
            absolute = resolve_link(page_url, href)
            if not absolute or is_document_url(absolute):
                continue
            if is_same_domain(absolute, self._root):
                links.append(absolute)
        return links

    async def fetch_pages(self, urls: List[str], language: str = "en") -> List[CrawledPage]:
        """
        Fetch and parse a known URL list (e.g. from a sitemap).

        Sequential, deduplicated by normalized URL and capped at
        max_pages. Failed pages are skipped.
        """
        pages: List[CrawledPage] = []
        seen: Set[str] = set()

        for url in urls:
            if len(pages) >= self.config.max_pages:
                break

            normalized = normalize_url(url)
            if normalized in seen:
                continue
            seen.add(normalized)

            result = await self.fetcher.fetch(url, timeout=self.config.timeout)
            if not result.ok:
                logger.warning(f"Skipping {url}: {result.error}")
                continue
            pages.append(parse_page(url, result.text, language))

        logger.info(f"Fetched {len(pages)}/{len(urls)} pages")
        return pages
