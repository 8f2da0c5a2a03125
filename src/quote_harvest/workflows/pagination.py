"""Total-page discovery from the "Page X of Y" indicator."""

from __future__ import annotations

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

from .errors import MalformedPageError
from .harvest_config import MAX_PAGES_CONSIDERED
from .record_parser import DEFAULT_SELECTORS, Selectors, node_text

logger = logging.getLogger(__name__)

# Totals may use digit-group separators, e.g. "Page 1 of 1,234".
_PAGE_OF = re.compile(r"page\s+\d+\s+of\s+(\d{1,3}(?:[,.\s]\d{3})+|\d+)", re.IGNORECASE)


def parse_page_count(indicator: str) -> int:
    """Return Y from an indicator like ``"Page 2 of 7"``."""

    if not indicator:
        raise MalformedPageError("empty pagination indicator")
    match = _PAGE_OF.search(indicator)
    if not match:
        raise MalformedPageError(f"no page count in {indicator[:80]!r}")
    total = int(re.sub(r"\D", "", match.group(1)))
    if total < 1:
        raise MalformedPageError(f"non-positive page count {total}")
    return total


def read_pagination_indicator(document: BeautifulSoup, selectors: Selectors = DEFAULT_SELECTORS) -> int:
    return parse_page_count(node_text(document.select_one(selectors.pagination)))


def resolve_total_pages(
    document: BeautifulSoup,
    cap: Optional[int] = MAX_PAGES_CONSIDERED,
    selectors: Selectors = DEFAULT_SELECTORS,
) -> int:
    """Return the usable page count (>= 1) for a category's first page.

    A missing or unparsable indicator means only the first page is assumed
    reachable. ``cap`` bounds the result regardless of what the page claims.
    """

    try:
        total = read_pagination_indicator(document, selectors)
    except MalformedPageError as exc:
        logger.debug("pagination fallback to 1 page: %s", exc)
        total = 1
    if cap is not None and cap > 0 and total > cap:
        logger.debug("pagination capped: %d -> %d", total, cap)
        total = cap
    return total


__all__ = ["parse_page_count", "read_pagination_indicator", "resolve_total_pages"]
