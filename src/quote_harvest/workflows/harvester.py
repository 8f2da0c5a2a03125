"""Per-category harvest: fetch, parse, accumulate, dedupe, bound.

Every failure while fetching or parsing a page is absorbed here. A category
that fails yields whatever it accumulated before the failure, possibly
nothing, and never aborts the run.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, Iterable, List, Optional

from bs4 import BeautifulSoup

from .errors import NetworkError, describe_error
from .fingerprint import fingerprint
from .harvest_config import SAMPLING_RANDOMIZED
from .harvest_utils import HarvestConfig
from .pagination import resolve_total_pages
from .record_parser import DEFAULT_SELECTORS, Selectors, load_document, parse_quotes
from .records import CategoryResult, QuoteRecord
from .sampling import normalize_sampling_policy, select_pages
from .transport import RequestPacer, Transport, build_page_url, default_headers

logger = logging.getLogger(__name__)


class _WorkingSet:
    """Records seen so far for one category, deduplicated in first-seen order."""

    def __init__(self) -> None:
        self._records: Dict[str, QuoteRecord] = {}
        self.raw_count = 0
        self.duplicates = 0

    def extend(self, records: Iterable[QuoteRecord]) -> int:
        added = 0
        for record in records:
            self.raw_count += 1
            key = fingerprint(record.text, record.author)
            if key in self._records:
                self.duplicates += 1
                continue
            self._records[key] = record
            added += 1
        return added

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> List[QuoteRecord]:
        # Fingerprints stay internal to the working set.
        return list(self._records.values())


class CategoryHarvester:
    def __init__(
        self,
        config: HarvestConfig,
        transport: Transport,
        pacer: RequestPacer,
        *,
        rng: Optional[random.Random] = None,
        selectors: Selectors = DEFAULT_SELECTORS,
    ) -> None:
        self.config = config
        self.transport = transport
        self.pacer = pacer
        self.rng = rng or random.Random(config.seed)
        self.selectors = selectors
        self.policy = normalize_sampling_policy(config.sampling_policy)
        self._headers = default_headers(config)

    async def _fetch_page(self, category: str, page: int) -> BeautifulSoup:
        url = build_page_url(self.config.base_url, category, page, self.config.page_size)
        async with self.pacer.slot():
            logger.debug("fetch %s page %d: %s", category, page, url)
            html = await self.transport.fetch(url, self._headers, self.config.timeout)
        return load_document(html)

    async def harvest(self, category: str) -> CategoryResult:
        result = CategoryResult(category=category)
        working = _WorkingSet()
        target = self.config.target_records_per_category
        page = 1
        try:
            result.pages_requested.append(page)
            document = await self._fetch_page(category, page)
            result.pages_fetched += 1
            working.extend(parse_quotes(document, category, self.selectors))
            result.total_pages = resolve_total_pages(
                document, self.config.max_pages_considered, self.selectors
            )
            logger.debug("%s: page 1 of %d yielded %d quotes", category, result.total_pages, len(working))

            if len(working) < target:
                remaining = select_pages(
                    result.total_pages,
                    target - len(working),
                    self.config.page_size,
                    already_fetched={1},
                    policy=self.policy,
                    max_pages=self.config.max_pages_considered,
                    rng=self.rng,
                )
                for page in remaining:
                    result.pages_requested.append(page)
                    document = await self._fetch_page(category, page)
                    result.pages_fetched += 1
                    added = working.extend(parse_quotes(document, category, self.selectors))
                    logger.debug("%s: page %d added %d quotes", category, page, added)
                    if len(working) >= target:
                        break
        except NetworkError as exc:
            logger.warning("%s: fetch failed on page %d, keeping %d quotes: %s", category, page, len(working), exc)
            result.errors.append(describe_error(exc))
        except Exception as exc:
            logger.exception("%s: unexpected failure on page %d, keeping %d quotes", category, page, len(working))
            result.errors.append(describe_error(exc))

        records = working.records()
        result.raw_count = working.raw_count
        result.duplicates_dropped = working.duplicates
        result.records = self._bound(records)
        result.trimmed = len(records) - len(result.records)
        return result

    def _bound(self, records: List[QuoteRecord]) -> List[QuoteRecord]:
        cap = self.config.record_cap
        if cap is None or len(records) <= cap:
            return records
        if self.policy == SAMPLING_RANDOMIZED:
            records = list(records)
            self.rng.shuffle(records)
        return records[:cap]


__all__ = ["CategoryHarvester"]
