"""Turn one fetched quotes page into QuoteRecords (BeautifulSoup + lxml)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from .harvest_config import (
    SEL_AUTHOR,
    SEL_PAGINATION,
    SEL_QUOTE_CONTAINER,
    SEL_QUOTE_TEXT,
    SEL_TAG,
)
from .records import QuoteRecord

# Leading attribution markers: em/en dash, hyphen, bullet, middle dot, tilde
_ATTRIBUTION_PREFIX = re.compile(r"^[—–‒―\-•·~]+\s*")


@dataclass(frozen=True)
class Selectors:
    container: str = SEL_QUOTE_CONTAINER
    text: str = SEL_QUOTE_TEXT
    author: str = SEL_AUTHOR
    tag: str = SEL_TAG
    pagination: str = SEL_PAGINATION


DEFAULT_SELECTORS = Selectors()


def load_document(html: str) -> BeautifulSoup:
    """Parse raw HTML into a queryable document."""

    return BeautifulSoup(html or "", "lxml")


def node_text(node: Optional[Tag]) -> str:
    """Return the whitespace-collapsed text of ``node`` or '' when missing."""

    if node is None:
        return ""
    return " ".join(node.get_text(" ").split())


def strip_attribution(author: str) -> str:
    return _ATTRIBUTION_PREFIX.sub("", author.strip(), count=1).strip()


def parse_quote(container: Tag, category: str, selectors: Selectors = DEFAULT_SELECTORS) -> Optional[QuoteRecord]:
    text = node_text(container.select_one(selectors.text))
    author = strip_attribution(node_text(container.select_one(selectors.author)))
    if not text or not author:
        return None
    tags = tuple(
        label
        for label in (node_text(node) for node in container.select(selectors.tag))
        if label
    )
    return QuoteRecord(text=text, author=author, category=category, tags=tags)


def parse_quotes(
    document: BeautifulSoup,
    category: str,
    selectors: Selectors = DEFAULT_SELECTORS,
) -> List[QuoteRecord]:
    """Return the well-formed quotes of a page in document order.

    Containers missing text or author are skipped; partial markup on some
    containers never aborts the page.
    """

    records: List[QuoteRecord] = []
    for container in document.select(selectors.container):
        record = parse_quote(container, category, selectors)
        if record is not None:
            records.append(record)
    return records


__all__ = [
    "Selectors",
    "DEFAULT_SELECTORS",
    "load_document",
    "node_text",
    "strip_attribution",
    "parse_quote",
    "parse_quotes",
]
