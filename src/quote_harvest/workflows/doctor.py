from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from .harvest_config import MIN_RECOMMENDED_DELAY_MS
from .harvest_utils import ENV_PREFIX, HarvestConfig, check_writable, collect_environment_warnings, lxml_available
from .transport import build_page_url, default_headers


def _env_overrides() -> List[str]:
    return sorted(name for name in os.environ if name.startswith(ENV_PREFIX))


def probe_source(config: HarvestConfig, *, timeout: Optional[float] = None) -> Dict[str, Any]:
    """Issue one GET for the first category's first page."""

    url = build_page_url(config.base_url, config.categories[0], 1, config.page_size)
    try:
        resp = requests.get(url, headers=default_headers(config), timeout=timeout or config.timeout)
    except requests.RequestException as exc:
        return {"url": url, "ok": False, "error": f"{type(exc).__name__}: {exc}"}
    return {"url": url, "ok": resp.ok, "status": resp.status_code, "bytes": len(resp.content)}


def build_doctor_report(config: Optional[HarvestConfig] = None, *, probe: bool = False) -> Dict[str, Any]:
    config = config or HarvestConfig()
    report: Dict[str, Any] = {
        "generated_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
        "ok": True,
        "checks": [],
        "environment_warnings": collect_environment_warnings(config),
    }

    def add_check(
        name: str,
        status: bool,
        *,
        detail: Optional[str] = None,
        remedy: Optional[str] = None,
        level: str = "warn",
    ) -> None:
        entry = {
            "name": name,
            "status": "ok" if status else "missing",
            "level": level,
            "detail": detail,
        }
        if remedy:
            entry["remedy"] = remedy
        report["checks"].append(entry)
        if not status and level == "warn":
            report["ok"] = False

    add_check(
        "lxml",
        lxml_available(),
        detail="lxml HTML parser available" if lxml_available() else "lxml HTML parser missing",
        remedy="pip install lxml",
    )

    output_dir = Path(config.output_dir)
    add_check(
        f"{ENV_PREFIX}OUTPUT_DIR",
        check_writable(output_dir),
        detail=str(output_dir),
        remedy=f"Create the snapshot directory or set {ENV_PREFIX}OUTPUT_DIR to a writable location.",
    )

    add_check(
        f"{ENV_PREFIX}CATEGORIES",
        bool(config.categories),
        detail=", ".join(config.categories) if config.categories else "no categories configured",
        remedy=f"Set {ENV_PREFIX}CATEGORIES to a comma-separated list.",
    )

    add_check(
        f"{ENV_PREFIX}DELAY_MS",
        config.inter_request_delay_ms >= MIN_RECOMMENDED_DELAY_MS,
        detail=f"{config.inter_request_delay_ms} ms between requests",
        remedy=f"Use at least {MIN_RECOMMENDED_DELAY_MS} ms to respect the source's rate tolerance.",
        level="info",
    )

    overrides = _env_overrides()
    add_check(
        "environment overrides",
        True,
        detail=", ".join(overrides) if overrides else "none",
        level="info",
    )

    if probe and config.categories:
        outcome = probe_source(config)
        report["probe"] = outcome
        add_check(
            "source probe",
            bool(outcome.get("ok")),
            detail=f"{outcome.get('url')} -> {outcome.get('status', outcome.get('error'))}",
            remedy=f"Check network access or {ENV_PREFIX}BASE_URL.",
        )

    return report


def format_doctor_report(report: Dict[str, Any]) -> str:
    lines: List[str] = []
    lines.append("quote-harvest doctor")
    lines.append(f"Generated: {report.get('generated_at')}")
    lines.append("")
    for check in report.get("checks", []):
        name = check.get("name", "check")
        status = check.get("status", "unknown")
        level = check.get("level", "info")
        lines.append(f"- [{level}] {name}: {status}")
        detail = check.get("detail")
        if detail:
            lines.append(f"  detail: {detail}")
        remedy = check.get("remedy")
        if remedy and status != "ok":
            lines.append(f"  remedy: {remedy}")
    warnings = report.get("environment_warnings") or []
    if warnings:
        lines.append("")
        lines.append("Environment warnings:")
        for warning in warnings:
            code = warning.get("code", "warning")
            message = warning.get("message", "")
            remedy = warning.get("remedy", "")
            lines.append(f"- {code}: {message}")
            if remedy:
                lines.append(f"  remedy: {remedy}")
    return "\n".join(lines).rstrip() + "\n"
