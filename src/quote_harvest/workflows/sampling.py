"""Page sampling: which page numbers to request for a category."""

from __future__ import annotations

import math
import random
from typing import Iterable, List, Optional

from .harvest_config import (
    MAX_PAGES_CONSIDERED,
    SAMPLING_POLICIES,
    SAMPLING_RANDOMIZED,
    SAMPLING_SEQUENTIAL,
)


def normalize_sampling_policy(value: Optional[str]) -> str:
    policy = (value or SAMPLING_RANDOMIZED).strip().lower()
    if policy not in SAMPLING_POLICIES:
        raise ValueError(f"Unsupported sampling policy: {value!r} (expected one of {', '.join(SAMPLING_POLICIES)})")
    return policy


def pages_needed(target_record_count: int, page_size: int) -> int:
    if target_record_count <= 0:
        return 0
    return math.ceil(target_record_count / max(1, page_size))


def select_sequential(
    total_pages: int,
    already_fetched: Iterable[int] = (),
    *,
    max_pages: int = MAX_PAGES_CONSIDERED,
) -> List[int]:
    """Pages ``2..min(total_pages, max_pages)`` in increasing order."""

    fetched = set(already_fetched)
    last = min(total_pages, max_pages)
    return [page for page in range(2, last + 1) if page not in fetched]


def select_randomized(
    total_pages: int,
    target_record_count: int,
    page_size: int,
    already_fetched: Iterable[int] = (),
    *,
    max_pages: int = MAX_PAGES_CONSIDERED,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """Draw just enough distinct pages to cover ``target_record_count``.

    When the pages needed cover every available page, all of them are
    returned; otherwise a uniform sample without replacement. Always sorted.
    """

    fetched = set(already_fetched)
    available = min(total_pages, max_pages)
    pool = [page for page in range(1, available + 1) if page not in fetched]
    needed = pages_needed(target_record_count, page_size)
    if needed <= 0 or not pool:
        return []
    if needed >= len(pool):
        return pool
    picker = rng or random.Random()
    return sorted(picker.sample(pool, needed))


def select_pages(
    total_pages: int,
    target_record_count: int,
    page_size: int,
    already_fetched: Iterable[int] = (),
    *,
    policy: str = SAMPLING_RANDOMIZED,
    max_pages: int = MAX_PAGES_CONSIDERED,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """Return the ascending page numbers still to request (never blocks)."""

    policy = normalize_sampling_policy(policy)
    if policy == SAMPLING_SEQUENTIAL:
        return select_sequential(total_pages, already_fetched, max_pages=max_pages)
    return select_randomized(
        total_pages,
        target_record_count,
        page_size,
        already_fetched,
        max_pages=max_pages,
        rng=rng,
    )


def sanity_check() -> None:
    assert pages_needed(30, 10) == 3
    assert pages_needed(31, 10) == 4
    assert select_sequential(5, {1}) == [2, 3, 4, 5]
    assert select_randomized(3, 100, 10, {1}) == [2, 3]


sanity_check()

__all__ = [
    "normalize_sampling_policy",
    "pages_needed",
    "select_sequential",
    "select_randomized",
    "select_pages",
    "sanity_check",
]
