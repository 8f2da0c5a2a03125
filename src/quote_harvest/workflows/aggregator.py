"""Drive the category harvester over every configured category."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Sequence

from .errors import describe_error
from .harvester import CategoryHarvester
from .harvest_utils import HarvestConfig
from .records import CategoryResult, Snapshot
from .snapshot_writer import SnapshotWriter

logger = logging.getLogger(__name__)


def run_date_key(now: Optional[datetime] = None) -> str:
    """Calendar date of the run (UTC), formatted YYYY-MM-DD."""

    return (now or datetime.now(timezone.utc)).strftime("%Y-%m-%d")


class RunAggregator:
    """Harvest all categories, assemble the Snapshot and hand it to the writer.

    One entry per configured category is always present, in configuration
    order, even when every harvest came back empty.
    """

    def __init__(
        self,
        config: HarvestConfig,
        harvester: CategoryHarvester,
        writer: Optional[SnapshotWriter] = None,
        *,
        date_key: Optional[str] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.config = config
        self.harvester = harvester
        self.writer = writer
        self.date_key = date_key
        self.clock = clock

    async def _harvest_one(self, category: str) -> CategoryResult:
        try:
            result = await self.harvester.harvest(category)
        except Exception as exc:
            logger.exception("%s: harvest raised; recording empty result", category)
            result = CategoryResult(category=category, errors=[describe_error(exc)])
        logger.info("%s: %d quotes (%s)", category, len(result.records), result.status)
        return result

    async def _harvest_all(self, categories: Sequence[str]) -> Dict[str, CategoryResult]:
        if self.config.category_concurrency <= 1:
            return {category: await self._harvest_one(category) for category in categories}

        semaphore = asyncio.Semaphore(self.config.category_concurrency)

        async def _bounded(category: str) -> CategoryResult:
            async with semaphore:
                return await self._harvest_one(category)

        gathered = await asyncio.gather(*(_bounded(category) for category in categories))
        return dict(zip(categories, gathered))

    async def run(self, categories: Optional[Sequence[str]] = None) -> Snapshot:
        ordered = list(dict.fromkeys(categories if categories is not None else self.config.categories))
        date_key = self.date_key or run_date_key(self.clock())
        snapshot = Snapshot(date_key=date_key, results=await self._harvest_all(ordered))
        if self.writer is not None:
            snapshot.path = str(self.writer.write(date_key, snapshot))
        return snapshot


__all__ = ["RunAggregator", "run_date_key"]
