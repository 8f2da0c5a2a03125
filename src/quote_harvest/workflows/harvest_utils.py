"""Harvest configuration plus shared helpers used by the harvest workflow."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .harvest_config import (
    ACCEPT_LANGUAGE,
    BACKOFF_INITIAL_SECONDS,
    BACKOFF_MAX_SECONDS,
    BASE_URL,
    CATEGORIES,
    INTER_REQUEST_DELAY_MS,
    MAX_ATTEMPTS,
    MAX_PAGES_CONSIDERED,
    MIN_RECOMMENDED_DELAY_MS,
    OUTPUT_DIR,
    PAGE_SIZE,
    REQUEST_TIMEOUT_SECONDS,
    SAMPLING_POLICY,
    TARGET_RECORDS_PER_CATEGORY,
    USER_AGENT,
)
from .sampling import normalize_sampling_policy

ENV_PREFIX = "QUOTE_HARVEST_"


def _env_int(name: str, default: int = 0) -> int:
    try:
        raw = os.getenv(name, "")
        return int(raw) if raw.strip() else default
    except (TypeError, ValueError):
        return default


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _env_float(name: str, default: float) -> float:
    try:
        raw = os.getenv(name, "")
        return float(raw) if raw.strip() else default
    except (TypeError, ValueError):
        return default


def _env_bool(name: str, default: str = "0") -> bool:
    raw = os.getenv(name, default)
    return str(raw).strip().lower() not in {"0", "false", "no", "off", ""}


def split_csv(value: str) -> Tuple[str, ...]:
    """Split a comma list, dropping blanks and duplicates but keeping order."""

    ordered: List[str] = []
    for token in (value or "").split(","):
        cleaned = token.strip()
        if cleaned and cleaned not in ordered:
            ordered.append(cleaned)
    return tuple(ordered)


@dataclass
class HarvestConfig:
    """Configuration for one harvest run."""

    categories: Tuple[str, ...] = CATEGORIES
    target_records_per_category: int = TARGET_RECORDS_PER_CATEGORY
    page_size: int = PAGE_SIZE
    max_pages_considered: int = MAX_PAGES_CONSIDERED
    sampling_policy: str = SAMPLING_POLICY
    inter_request_delay_ms: int = INTER_REQUEST_DELAY_MS
    enforce_record_cap: bool = True
    base_url: str = BASE_URL
    output_dir: Path = field(default_factory=lambda: OUTPUT_DIR)
    timeout: float = REQUEST_TIMEOUT_SECONDS
    max_attempts: int = MAX_ATTEMPTS
    backoff_initial: float = BACKOFF_INITIAL_SECONDS
    backoff_max: float = BACKOFF_MAX_SECONDS
    user_agent: str = USER_AGENT
    accept_language: str = ACCEPT_LANGUAGE
    # Categories harvested at once; all requests still share one pacer.
    category_concurrency: int = 1
    seed: Optional[int] = None

    @property
    def record_cap(self) -> Optional[int]:
        return self.target_records_per_category if self.enforce_record_cap else None

    @property
    def inter_request_delay(self) -> float:
        return max(0, self.inter_request_delay_ms) / 1000.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": list(self.categories),
            "target_records_per_category": self.target_records_per_category,
            "page_size": self.page_size,
            "max_pages_considered": self.max_pages_considered,
            "sampling_policy": self.sampling_policy,
            "inter_request_delay_ms": self.inter_request_delay_ms,
            "enforce_record_cap": self.enforce_record_cap,
            "base_url": self.base_url,
            "output_dir": str(self.output_dir),
            "timeout": self.timeout,
            "max_attempts": self.max_attempts,
            "category_concurrency": self.category_concurrency,
            "seed": self.seed,
        }


def load_config_from_env(base: Optional[HarvestConfig] = None) -> HarvestConfig:
    """Overlay ``QUOTE_HARVEST_*`` environment variables on ``base``.

    Unparsable numbers keep the base value; validation happens separately.
    """

    config = base or HarvestConfig()
    categories = split_csv(os.getenv(f"{ENV_PREFIX}CATEGORIES", ""))
    if categories:
        config.categories = categories
    config.target_records_per_category = _env_int(
        f"{ENV_PREFIX}TARGET_RECORDS", config.target_records_per_category
    )
    config.page_size = _env_int(f"{ENV_PREFIX}PAGE_SIZE", config.page_size)
    config.max_pages_considered = _env_int(f"{ENV_PREFIX}MAX_PAGES", config.max_pages_considered)
    config.sampling_policy = os.getenv(f"{ENV_PREFIX}SAMPLING_POLICY", "").strip() or config.sampling_policy
    config.inter_request_delay_ms = _env_int(f"{ENV_PREFIX}DELAY_MS", config.inter_request_delay_ms)
    if os.getenv(f"{ENV_PREFIX}ENFORCE_CAP") is not None:
        config.enforce_record_cap = _env_bool(f"{ENV_PREFIX}ENFORCE_CAP", "1")
    config.base_url = os.getenv(f"{ENV_PREFIX}BASE_URL", "").strip() or config.base_url
    output_dir = os.getenv(f"{ENV_PREFIX}OUTPUT_DIR", "").strip()
    if output_dir:
        config.output_dir = Path(output_dir)
    config.timeout = _env_float(f"{ENV_PREFIX}TIMEOUT", config.timeout)
    config.max_attempts = _env_int(f"{ENV_PREFIX}MAX_ATTEMPTS", config.max_attempts)
    config.category_concurrency = _env_int(f"{ENV_PREFIX}CONCURRENCY", config.category_concurrency)
    seed = _env_optional_int(f"{ENV_PREFIX}SEED")
    if seed is not None:
        config.seed = seed
    return config


def validate_config(config: HarvestConfig) -> HarvestConfig:
    """Normalize and check ``config`` in place; raise ValueError when invalid."""

    config.sampling_policy = normalize_sampling_policy(config.sampling_policy)
    config.categories = tuple(config.categories)
    if not config.categories:
        raise ValueError("At least one category must be configured")
    if any(not str(cat).strip() for cat in config.categories):
        raise ValueError("Category names must be non-empty")
    if config.target_records_per_category <= 0:
        raise ValueError("target_records_per_category must be positive")
    if config.page_size <= 0:
        raise ValueError("page_size must be positive")
    if config.max_pages_considered <= 0:
        raise ValueError("max_pages_considered must be positive")
    if config.inter_request_delay_ms < 0:
        raise ValueError("inter_request_delay_ms cannot be negative")
    if config.timeout <= 0:
        raise ValueError("timeout must be positive")
    if config.max_attempts <= 0:
        raise ValueError("max_attempts must be positive")
    if config.category_concurrency <= 0:
        raise ValueError("category_concurrency must be positive")
    if not config.base_url.strip():
        raise ValueError("base_url must be set")
    return config


def check_writable(path: Path) -> bool:
    try:
        probe = path
        while not probe.exists():
            if probe.parent == probe:
                return False
            probe = probe.parent
        return os.access(probe, os.W_OK)
    except Exception:
        return False


def lxml_available() -> bool:
    try:
        import lxml  # noqa: F401
    except ImportError:
        return False
    return True


def collect_environment_warnings(config: Optional[HarvestConfig] = None) -> List[Dict[str, str]]:
    """Return non-fatal warnings about the runtime environment."""

    config = config or HarvestConfig()
    warnings: List[Dict[str, str]] = []
    if config.inter_request_delay_ms < MIN_RECOMMENDED_DELAY_MS:
        warnings.append(
            {
                "code": "inter_request_delay_low",
                "message": f"Inter-request delay {config.inter_request_delay_ms} ms is below {MIN_RECOMMENDED_DELAY_MS} ms",
                "remedy": f"Set --delay-ms (or {ENV_PREFIX}DELAY_MS) to at least {MIN_RECOMMENDED_DELAY_MS}.",
            }
        )
    if not check_writable(Path(config.output_dir)):
        warnings.append(
            {
                "code": "output_dir_not_writable",
                "message": f"Snapshot directory {config.output_dir} is not writable",
                "remedy": f"Choose a writable --out directory (or {ENV_PREFIX}OUTPUT_DIR).",
            }
        )
    if not lxml_available():
        warnings.append(
            {
                "code": "lxml_missing",
                "message": "lxml parser is not installed",
                "remedy": "pip install lxml",
            }
        )
    return warnings


__all__ = [
    "HarvestConfig",
    "load_config_from_env",
    "validate_config",
    "split_csv",
    "collect_environment_warnings",
    "lxml_available",
    "check_writable",
]
