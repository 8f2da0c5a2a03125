from __future__ import annotations

import asyncio
import json
import logging
import random
import secrets
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .core.keys import K_CATEGORIES, K_COUNTS, K_DATE_KEY, K_ERRORS, K_RECORDS, K_RUN_ID, K_SNAPSHOT_PATH, K_STATUS
from .workflows.aggregator import RunAggregator, run_date_key
from .workflows.harvest_utils import HarvestConfig, collect_environment_warnings, validate_config
from .workflows.harvester import CategoryHarvester
from .workflows.records import STATUS_EMPTY, STATUS_OK, STATUS_PARTIAL, Snapshot
from .workflows.snapshot_writer import JsonSnapshotWriter, SnapshotWriter
from .workflows.transport import AiohttpTransport, RequestPacer, SleepFunc, build_page_url

logger = logging.getLogger(__name__)

TransportFactory = Callable[[HarvestConfig], Any]


def generate_run_id(now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
    suffix = secrets.token_hex(3)
    return f"{stamp}_{suffix}"


def _iso(ts: datetime) -> str:
    return ts.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_run_summary(
    *,
    run_id: str,
    config: HarvestConfig,
    snapshot: Snapshot,
    started_at: datetime,
    finished_at: datetime,
    rate: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    items: List[Dict[str, Any]] = [result.to_summary() for result in snapshot.results.values()]
    statuses = [item[K_STATUS] for item in items]
    rate = rate or {}
    return {
        K_RUN_ID: run_id,
        K_DATE_KEY: snapshot.date_key,
        K_SNAPSHOT_PATH: snapshot.path,
        "started_at": _iso(started_at),
        "finished_at": _iso(finished_at),
        "duration_ms": int((finished_at - started_at).total_seconds() * 1000),
        "sampling_policy": config.sampling_policy,
        K_COUNTS: {
            K_CATEGORIES: len(items),
            K_RECORDS: sum(item[K_RECORDS] for item in items),
            STATUS_OK: statuses.count(STATUS_OK),
            STATUS_PARTIAL: statuses.count(STATUS_PARTIAL),
            STATUS_EMPTY: statuses.count(STATUS_EMPTY),
            "requests": int(rate.get("requests", 0)),
        },
        "rate": rate,
        K_CATEGORIES: items,
    }


def render_run_report(summary: Dict[str, Any]) -> str:
    lines: List[str] = []
    lines.append("# Harvest Report")
    lines.append("")
    lines.append(f"Run ID: {summary.get(K_RUN_ID)}")
    lines.append(f"Date: {summary.get(K_DATE_KEY)}")
    lines.append(f"Snapshot: {summary.get(K_SNAPSHOT_PATH)}")
    lines.append(f"Sampling: {summary.get('sampling_policy')}")
    lines.append(f"Duration: {summary.get('duration_ms')} ms")
    lines.append("")
    env_warnings = summary.get("environment_warnings") or []
    if env_warnings:
        lines.append("## Environment Warnings")
        for warning in env_warnings:
            lines.append(f"- {warning.get('code', 'warning')}: {warning.get('message', '')}")
        lines.append("")
    lines.append("## Counts")
    lines.append("| metric | value |")
    lines.append("| --- | --- |")
    counts = summary.get(K_COUNTS) or {}
    for key in (K_CATEGORIES, K_RECORDS, STATUS_OK, STATUS_PARTIAL, STATUS_EMPTY, "requests"):
        lines.append(f"| {key} | {counts.get(key, 0)} |")
    lines.append("")
    lines.append("## Categories")
    for item in summary.get(K_CATEGORIES) or []:
        line = f"- {item.get('category')}: {item.get(K_RECORDS, 0)} quotes ({item.get(K_STATUS)})"
        errors = item.get(K_ERRORS) or []
        if errors:
            line = f"{line}; {errors[-1]}"
        lines.append(line)
    return "\n".join(lines).rstrip() + "\n"


def planned_urls(config: HarvestConfig) -> List[str]:
    return [build_page_url(config.base_url, category, 1, config.page_size) for category in config.categories]


async def harvest_snapshot(
    config: HarvestConfig,
    *,
    transport_factory: TransportFactory = AiohttpTransport,
    writer: Optional[SnapshotWriter] = None,
    date_key: Optional[str] = None,
    rng: Optional[random.Random] = None,
    sleep: Optional[SleepFunc] = None,
) -> Tuple[Snapshot, Dict[str, Any]]:
    """Run one harvest against a transport built by ``transport_factory``."""

    pacer = RequestPacer(config.inter_request_delay, sleep=sleep)
    async with transport_factory(config) as transport:
        harvester = CategoryHarvester(config, transport, pacer, rng=rng)
        aggregator = RunAggregator(config, harvester, writer, date_key=date_key)
        snapshot = await aggregator.run(config.categories)
    return snapshot, pacer.rate_metrics()


def run_harvest(
    config: HarvestConfig,
    *,
    date_key: Optional[str] = None,
    summary_path: Optional[Path] = None,
    transport_factory: TransportFactory = AiohttpTransport,
    writer: Optional[SnapshotWriter] = None,
    rng: Optional[random.Random] = None,
    sleep: Optional[SleepFunc] = None,
) -> Tuple[Dict[str, Any], int]:
    """Harvest every category, persist the snapshot and summarize the run.

    Returns ``(summary, exit_code)``; the exit code reflects completion of the
    run, not per-category success.
    """

    validate_config(config)
    started_at = datetime.now(timezone.utc)
    run_id = generate_run_id(started_at)

    env_warnings = collect_environment_warnings(config)
    for warning in env_warnings:
        message = warning.get("message") or warning.get("code") or "environment warning"
        remedy = warning.get("remedy")
        if remedy:
            print(f"[quote-harvest] warning: {message} ({remedy})", file=sys.stderr)
        else:
            print(f"[quote-harvest] warning: {message}", file=sys.stderr)

    writer = writer or JsonSnapshotWriter(config.output_dir)
    snapshot, rate = asyncio.run(
        harvest_snapshot(
            config,
            transport_factory=transport_factory,
            writer=writer,
            date_key=date_key or run_date_key(started_at),
            rng=rng,
            sleep=sleep,
        )
    )

    finished_at = datetime.now(timezone.utc)
    summary = build_run_summary(
        run_id=run_id,
        config=config,
        snapshot=snapshot,
        started_at=started_at,
        finished_at=finished_at,
        rate=rate,
    )
    if env_warnings:
        summary["environment_warnings"] = env_warnings

    degraded = [item["category"] for item in summary[K_CATEGORIES] if item[K_STATUS] != STATUS_OK]
    if degraded:
        logger.warning("degraded categories: %s", ", ".join(degraded))

    if summary_path is not None:
        summary_path.parent.mkdir(parents=True, exist_ok=True)
        summary_path.write_text(json.dumps(summary, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")

    return summary, 0
