"""
HTML parsing helpers used by the crawler.
"""

from __future__ import annotations

import re
from typing import List

from bs4 import BeautifulSoup, Tag


# Tags whose text never belongs to a matched field
_NON_CONTENT = ["script", "style", "noscript", "template", "svg", "canvas"]


def parse_html(html: str) -> BeautifulSoup:
    """Parse a document, dropping non-content tags."""
    soup = BeautifulSoup(html or "", "lxml")
    for tag in soup(_NON_CONTENT):
        tag.decompose()
    return soup


def node_text(node: Tag) -> str:
    """Concatenated text of a node and its descendants, whitespace collapsed."""
    text = node.get_text(" ", strip=True)
    return re.sub(r"\s+", " ", text).strip()


def select_texts(soup: BeautifulSoup, selector: str) -> List[str]:
    """Text of every node matching `selector`, in document order."""
    return [node_text(node) for node in soup.select(selector)]


def extract_page_title(soup: BeautifulSoup) -> str:
    """Page <title>, used for run logging."""
    if soup.title and soup.title.string:
        return soup.title.string.strip()
    return ""
