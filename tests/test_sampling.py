import random

import pytest

from quote_harvest.workflows.sampling import (
    normalize_sampling_policy,
    pages_needed,
    select_pages,
)


def test_randomized_draws_exact_distinct_sorted_pages():
    for seed in range(50):
        pages = select_pages(20, 30, 10, {1}, policy="randomized", max_pages=20, rng=random.Random(seed))
        assert len(pages) == 3
        assert len(set(pages)) == 3
        assert pages == sorted(pages)
        assert all(2 <= p <= 20 for p in pages)


def test_randomized_without_prior_fetch_may_include_first_page():
    seen = set()
    for seed in range(200):
        seen.update(select_pages(20, 30, 10, (), policy="randomized", rng=random.Random(seed)))
    assert 1 in seen
    assert seen <= set(range(1, 21))


def test_randomized_returns_all_available_when_need_exceeds_supply():
    assert select_pages(4, 100, 10, {1}, policy="randomized") == [2, 3, 4]
    assert select_pages(50, 1000, 10, {1}, policy="randomized", max_pages=5) == [2, 3, 4, 5]


def test_randomized_nothing_needed():
    assert select_pages(20, 0, 10, {1}, policy="randomized") == []
    assert select_pages(1, 30, 10, {1}, policy="randomized") == []


def test_sequential_pages_in_order_and_capped():
    assert select_pages(5, 10, 10, {1}, policy="sequential") == [2, 3, 4, 5]
    assert select_pages(50, 10, 10, {1}, policy="sequential", max_pages=20) == list(range(2, 21))
    assert select_pages(1, 10, 10, {1}, policy="sequential") == []


def test_pages_needed_rounds_up():
    assert pages_needed(30, 10) == 3
    assert pages_needed(31, 10) == 4
    assert pages_needed(0, 10) == 0


def test_normalize_sampling_policy():
    assert normalize_sampling_policy(" Sequential ") == "sequential"
    assert normalize_sampling_policy(None) == "randomized"
    with pytest.raises(ValueError):
        normalize_sampling_policy("alphabetical")
