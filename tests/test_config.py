from pathlib import Path

import pytest

from quote_harvest.workflows.harvest_config import CATEGORIES, PAGE_SIZE
from quote_harvest.workflows.harvest_utils import (
    HarvestConfig,
    collect_environment_warnings,
    load_config_from_env,
    split_csv,
    validate_config,
)


def test_defaults() -> None:
    config = HarvestConfig()

    assert config.categories == CATEGORIES
    assert config.target_records_per_category == 50
    assert config.inter_request_delay == 0.9
    assert config.record_cap == 50
    assert config.sampling_policy == "randomized"


def test_env_overlay(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("QUOTE_HARVEST_CATEGORIES", "love, daily,love,")
    monkeypatch.setenv("QUOTE_HARVEST_TARGET_RECORDS", "12")
    monkeypatch.setenv("QUOTE_HARVEST_PAGE_SIZE", "not-a-number")
    monkeypatch.setenv("QUOTE_HARVEST_SAMPLING_POLICY", "sequential")
    monkeypatch.setenv("QUOTE_HARVEST_ENFORCE_CAP", "off")
    monkeypatch.setenv("QUOTE_HARVEST_OUTPUT_DIR", str(tmp_path / "snaps"))
    monkeypatch.setenv("QUOTE_HARVEST_SEED", "7")

    config = load_config_from_env()

    assert config.categories == ("love", "daily")
    assert config.target_records_per_category == 12
    assert config.page_size == PAGE_SIZE
    assert config.sampling_policy == "sequential"
    assert config.enforce_record_cap is False
    assert config.record_cap is None
    assert config.output_dir == tmp_path / "snaps"
    assert config.seed == 7


def test_env_overlay_keeps_base_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("QUOTE_HARVEST_CATEGORIES", "QUOTE_HARVEST_ENFORCE_CAP", "QUOTE_HARVEST_SEED"):
        monkeypatch.delenv(name, raising=False)

    config = load_config_from_env(HarvestConfig(categories=("strength",), enforce_record_cap=False))

    assert config.categories == ("strength",)
    assert config.enforce_record_cap is False
    assert config.seed is None


def test_split_csv() -> None:
    assert split_csv(" a, b ,,a ,c") == ("a", "b", "c")
    assert split_csv("") == ()


@pytest.mark.parametrize(
    "overrides",
    [
        {"categories": ()},
        {"categories": ("daily", " ")},
        {"target_records_per_category": 0},
        {"page_size": 0},
        {"max_pages_considered": 0},
        {"inter_request_delay_ms": -1},
        {"max_attempts": 0},
        {"category_concurrency": 0},
        {"sampling_policy": "alphabetical"},
        {"base_url": " "},
    ],
)
def test_validate_config_rejects(overrides) -> None:
    with pytest.raises(ValueError):
        validate_config(HarvestConfig(**overrides))


def test_validate_config_normalizes_policy() -> None:
    config = validate_config(HarvestConfig(sampling_policy=" Sequential", categories=["daily"]))

    assert config.sampling_policy == "sequential"
    assert config.categories == ("daily",)


def test_environment_warnings(tmp_path: Path) -> None:
    assert collect_environment_warnings(HarvestConfig(output_dir=tmp_path)) == []

    codes = [w["code"] for w in collect_environment_warnings(HarvestConfig(inter_request_delay_ms=100, output_dir=tmp_path))]

    assert codes == ["inter_request_delay_low"]
