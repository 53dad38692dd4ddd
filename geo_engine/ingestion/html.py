"""
Regex-based HTML extraction.

Pages are parsed with a handful of patterns rather than a DOM; the
crawler only needs title, headings, readable text and anchors.
"""

import html as html_lib
import re
from typing import List

from geo_engine.utils.text import collapse_whitespace

TITLE_PATTERN = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
HEADING_PATTERN = re.compile(r"<h([1-6])[^>]*>(.*?)</h\1>", re.IGNORECASE | re.DOTALL)
BODY_PATTERN = re.compile(r"<body[^>]*>(.*?)</body>", re.IGNORECASE | re.DOTALL)
LINK_PATTERN = re.compile(r"""<a\s[^>]*?href=["']([^"']+)["']""", re.IGNORECASE)
TAG_PATTERN = re.compile(r"<[^>]+>")


def clean_text(text: str) -> str:
    return collapse_whitespace(html_lib.unescape(text))


def extract_title(html: str) -> str:
    match = TITLE_PATTERN.search(html)
    return clean_text(TAG_PATTERN.sub(" ", match.group(1))) if match else ""


def extract_headings(html: str) -> List[str]:
    headings = []
    for match in HEADING_PATTERN.finditer(html):
        heading = clean_text(TAG_PATTERN.sub(" ", match.group(2)))
        if heading:
            headings.append(heading)
    return headings


def extract_body_text(html: str) -> str:
    """Readable text of the <body> (or the whole document)."""
    match = BODY_PATTERN.search(html)
    body = match.group(1) if match else html

    # Remove script and style elements
    body = re.sub(r"<script[^>]*>.*?</script>", "", body, flags=re.DOTALL | re.IGNORECASE)
    body = re.sub(r"<style[^>]*>.*?</style>", "", body, flags=re.DOTALL | re.IGNORECASE)
    body = re.sub(r"<noscript[^>]*>.*?</noscript>", "", body, flags=re.DOTALL | re.IGNORECASE)

    return clean_text(TAG_PATTERN.sub(" ", body))


def extract_links(html: str) -> List[str]:
    """Raw href values in document order, deduplicated."""
    seen = set()
    links = []
    for match in LINK_PATTERN.finditer(html):
        href = html_lib.unescape(match.group(1).strip())
        if href not in seen:
            seen.add(href)
            links.append(href)
    return links
