from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from .runner import planned_urls, render_run_report, run_harvest
from .workflows.doctor import build_doctor_report, format_doctor_report
from .workflows.harvest_utils import ENV_PREFIX, HarvestConfig, load_config_from_env, split_csv, validate_config

app = typer.Typer(add_help_option=False, no_args_is_help=False)


def _minimal_help() -> str:
    return """quote-harvest

Usage:
  quote-harvest run [--out <DIR>] [--categories <CSV>] [--target N] [--policy sequential|randomized] [--json] [--dry-run]
  quote-harvest doctor [--probe]

Common options:
  --out <DIR>        Snapshot directory (default: daily-quotes).
  --categories <CSV> Categories to harvest, in snapshot order.
  --target N         Quotes wanted (and kept at most) per category.
  --policy P         Page sampling: sequential or randomized.
  --json             Print the run summary JSON to stdout only.
  --dry-run          Validate configuration and list first-page URLs.

Discoverability:
  --help-full     Expanded help + env vars + artifacts.
  --find <query>  Search commands, flags, env vars, artifacts.
  --doctor        Run environment diagnostics and exit.
"""


def _help_full() -> str:
    return f"""quote-harvest (dated per-category quote snapshots)

Commands:
  run       Harvest every category and write <out>/<YYYY-MM-DD>.json.
  doctor    Print environment diagnostics (--probe issues one GET).

Run options:
  --out DIR            Snapshot directory.
  --categories CSV     Ordered category list.
  --target N           Target and cap of quotes per category.
  --page-size N        Quotes per source page (page_size query parameter).
  --max-pages N        Never consider more than N pages per category.
  --policy P           sequential (pages 2..N in order) or randomized (bounded sample).
  --delay-ms N         Pause after every request (default 900).
  --concurrency N      Categories harvested at once (requests stay paced).
  --seed N             Seed randomized sampling for reproducible runs.
  --date YYYY-MM-DD    Override the snapshot date key.
  --no-cap             Keep every unique quote instead of capping at --target.
  --summary PATH       Also write the run summary JSON to PATH.
  --json               Print summary JSON to stdout only.
  --dry-run            Validate configuration without fetching.
  --log-level LEVEL    Logging level (default INFO).

Environment ({ENV_PREFIX}*, also read from .env):
  {ENV_PREFIX}CATEGORIES, {ENV_PREFIX}TARGET_RECORDS, {ENV_PREFIX}PAGE_SIZE,
  {ENV_PREFIX}MAX_PAGES, {ENV_PREFIX}SAMPLING_POLICY, {ENV_PREFIX}DELAY_MS,
  {ENV_PREFIX}ENFORCE_CAP, {ENV_PREFIX}BASE_URL, {ENV_PREFIX}OUTPUT_DIR,
  {ENV_PREFIX}TIMEOUT, {ENV_PREFIX}MAX_ATTEMPTS, {ENV_PREFIX}CONCURRENCY,
  {ENV_PREFIX}SEED, {ENV_PREFIX}LOG_LEVEL

Artifacts:
  <out>/<YYYY-MM-DD>.json  Snapshot: category -> [{{text, author, category, tags}}].
  --summary PATH           Run summary with per-category counts and errors.

Exit codes:
  0  run completed (categories may be degraded; see the report)
  2  invalid configuration
  3  fatal error (e.g. snapshot not writable)
"""


_FIND_INDEX = [
    ("command", "run", "Harvest every category and write the dated snapshot."),
    ("command", "doctor", "Print environment diagnostics."),
    ("flag", "--out", "Snapshot directory."),
    ("flag", "--categories", "Ordered category list (CSV)."),
    ("flag", "--target", "Target and cap of quotes per category."),
    ("flag", "--page-size", "Quotes per source page."),
    ("flag", "--max-pages", "Cap on pages considered per category."),
    ("flag", "--policy", "Page sampling: sequential or randomized."),
    ("flag", "--delay-ms", "Pause after every request."),
    ("flag", "--concurrency", "Categories harvested at once."),
    ("flag", "--seed", "Seed for randomized sampling."),
    ("flag", "--date", "Override the snapshot date key."),
    ("flag", "--no-cap", "Keep every unique quote."),
    ("flag", "--summary", "Write the run summary JSON."),
    ("flag", "--json", "Print summary JSON to stdout only."),
    ("flag", "--dry-run", "Validate configuration without fetching."),
    ("flag", "--probe", "Doctor: issue one GET against the source."),
    ("flag", "--help-full", "Expanded help, env vars, artifacts."),
    ("flag", "--find", "Search commands, flags, env vars, artifacts."),
    ("flag", "--doctor", "Run environment diagnostics and exit."),
    ("env", f"{ENV_PREFIX}CATEGORIES", "Default category list."),
    ("env", f"{ENV_PREFIX}SAMPLING_POLICY", "Default sampling policy."),
    ("env", f"{ENV_PREFIX}DELAY_MS", "Default inter-request delay."),
    ("env", f"{ENV_PREFIX}OUTPUT_DIR", "Default snapshot directory."),
    ("env", f"{ENV_PREFIX}BASE_URL", "Quotes source base URL."),
    ("artifact", "<YYYY-MM-DD>.json", "Dated snapshot document."),
]


def _run_find(query: str) -> str:
    needle = (query or "").strip().lower()
    if not needle:
        return ""
    lines = []
    for category, name, desc in _FIND_INDEX:
        haystack = f"{category} {name} {desc}".lower()
        if needle in haystack:
            lines.append(f"{category} {name} - {desc}")
    return "\n".join(lines)


def _setup_logging(level: Optional[str]) -> None:
    name = (level or os.getenv(f"{ENV_PREFIX}LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _parse_date(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").strftime("%Y-%m-%d")
    except ValueError:
        raise typer.BadParameter(f"Invalid --date {value!r}; expected YYYY-MM-DD")


def _resolve_config(
    *,
    out: Optional[Path] = None,
    categories: Optional[str] = None,
    target: Optional[int] = None,
    page_size: Optional[int] = None,
    max_pages: Optional[int] = None,
    policy: Optional[str] = None,
    delay_ms: Optional[int] = None,
    concurrency: Optional[int] = None,
    seed: Optional[int] = None,
    no_cap: bool = False,
) -> HarvestConfig:
    load_dotenv(override=False)
    config = load_config_from_env(HarvestConfig())
    if out is not None:
        config.output_dir = out
    if categories is not None:
        config.categories = split_csv(categories)
    if target is not None:
        config.target_records_per_category = target
    if page_size is not None:
        config.page_size = page_size
    if max_pages is not None:
        config.max_pages_considered = max_pages
    if policy is not None:
        config.sampling_policy = policy
    if delay_ms is not None:
        config.inter_request_delay_ms = delay_ms
    if concurrency is not None:
        config.category_concurrency = concurrency
    if seed is not None:
        config.seed = seed
    if no_cap:
        config.enforce_record_cap = False
    return config


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    help: bool = typer.Option(False, "--help", "-h", is_eager=True, help="Show minimal help."),
    help_full: bool = typer.Option(False, "--help-full", is_eager=True, help="Show expanded help."),
    find: Optional[str] = typer.Option(None, "--find", is_eager=True, help="Search commands, flags, env vars, artifacts."),
    doctor: bool = typer.Option(False, "--doctor", is_eager=True, help="Run environment diagnostics and exit."),
) -> None:
    if help_full:
        typer.echo(_help_full())
        raise typer.Exit(code=0)
    if find is not None:
        output = _run_find(find)
        if output:
            typer.echo(output)
        raise typer.Exit(code=0)
    if doctor:
        report = build_doctor_report(_resolve_config())
        typer.echo(format_doctor_report(report))
        raise typer.Exit(code=0 if report.get("ok", True) else 2)
    if help or ctx.invoked_subcommand is None:
        typer.echo(_minimal_help())
        raise typer.Exit(code=0)


@app.command("doctor", add_help_option=True)
def doctor_cmd(
    out: Optional[Path] = typer.Option(None, "--out", help="Snapshot directory to check."),
    probe: bool = typer.Option(False, "--probe", help="Issue one GET against the quotes source."),
) -> None:
    """Print environment diagnostics."""
    report = build_doctor_report(_resolve_config(out=out), probe=probe)
    typer.echo(format_doctor_report(report))
    raise typer.Exit(code=0 if report.get("ok", True) else 2)


@app.command("run", add_help_option=True)
def run_cmd(
    out: Optional[Path] = typer.Option(None, "--out", help="Snapshot directory."),
    categories: Optional[str] = typer.Option(None, "--categories", help="Ordered category list (CSV)."),
    target: Optional[int] = typer.Option(None, "--target", help="Target and cap of quotes per category."),
    page_size: Optional[int] = typer.Option(None, "--page-size", help="Quotes per source page."),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", help="Cap on pages considered per category."),
    policy: Optional[str] = typer.Option(None, "--policy", help="Page sampling: sequential or randomized."),
    delay_ms: Optional[int] = typer.Option(None, "--delay-ms", help="Pause after every request (ms)."),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="Categories harvested at once."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for randomized sampling."),
    date: Optional[str] = typer.Option(None, "--date", help="Override the snapshot date key (YYYY-MM-DD)."),
    no_cap: bool = typer.Option(False, "--no-cap", help="Keep every unique quote."),
    summary_path: Optional[Path] = typer.Option(None, "--summary", help="Write the run summary JSON to this path."),
    json_out: bool = typer.Option(False, "--json", help="Print summary JSON to stdout only."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate configuration without fetching."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level."),
) -> None:
    """Harvest every category and write the dated snapshot."""
    _setup_logging(log_level)
    date_key = _parse_date(date)
    config = _resolve_config(
        out=out,
        categories=categories,
        target=target,
        page_size=page_size,
        max_pages=max_pages,
        policy=policy,
        delay_ms=delay_ms,
        concurrency=concurrency,
        seed=seed,
        no_cap=no_cap,
    )
    try:
        validate_config(config)
    except ValueError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2)

    if dry_run:
        plan = {"config": config.to_dict(), "first_page_urls": planned_urls(config)}
        typer.echo(json.dumps(plan, ensure_ascii=False, indent=None if json_out else 2))
        raise typer.Exit(code=0)

    try:
        summary, exit_code = run_harvest(config, date_key=date_key, summary_path=summary_path)
    except Exception as exc:
        if not json_out:
            typer.echo(f"fatal: {exc}", err=True)
        raise typer.Exit(code=3)
    if json_out:
        sys.stdout.write(json.dumps(summary, ensure_ascii=False) + "\n")
    else:
        typer.echo(render_run_report(summary))
    raise typer.Exit(code=exit_code)
