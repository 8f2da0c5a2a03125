from pathlib import Path

import pytest
import requests

from quote_harvest.workflows import doctor
from quote_harvest.workflows.harvest_utils import HarvestConfig


class _Response:
    def __init__(self, status_code: int, content: bytes) -> None:
        self.status_code = status_code
        self.content = content
        self.ok = 200 <= status_code < 300


def test_doctor_report_checks(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QUOTE_HARVEST_SEED", "1")

    report = doctor.build_doctor_report(HarvestConfig(output_dir=tmp_path / "out"))

    names = [check["name"] for check in report["checks"]]
    assert names == [
        "lxml",
        "QUOTE_HARVEST_OUTPUT_DIR",
        "QUOTE_HARVEST_CATEGORIES",
        "QUOTE_HARVEST_DELAY_MS",
        "environment overrides",
    ]
    assert report["ok"] is True
    overrides = [c for c in report["checks"] if c["name"] == "environment overrides"][0]
    assert "QUOTE_HARVEST_SEED" in overrides["detail"]
    assert "probe" not in report


def test_doctor_low_delay_is_informational(tmp_path: Path) -> None:
    report = doctor.build_doctor_report(HarvestConfig(output_dir=tmp_path, inter_request_delay_ms=10))

    delay = [c for c in report["checks"] if c["name"] == "QUOTE_HARVEST_DELAY_MS"][0]
    assert delay["status"] == "missing"
    assert delay["level"] == "info"
    assert report["ok"] is True
    assert "remedy:" in doctor.format_doctor_report(report)


def test_doctor_probe_uses_first_category(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append((url, headers, timeout))
        return _Response(200, b"<html></html>")

    monkeypatch.setattr(doctor.requests, "get", fake_get)
    config = HarvestConfig(categories=("love", "daily"), output_dir=tmp_path, base_url="https://x.test/tags/")

    report = doctor.build_doctor_report(config, probe=True)

    assert calls[0][0] == "https://x.test/tags/love?page=1&page_size=10"
    assert "User-Agent" in calls[0][1]
    assert report["probe"] == {"url": calls[0][0], "ok": True, "status": 200, "bytes": 13}
    assert report["ok"] is True


def test_doctor_probe_failure_marks_report(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(url, headers=None, timeout=None):
        raise requests.ConnectionError("no route")

    monkeypatch.setattr(doctor.requests, "get", fake_get)

    report = doctor.build_doctor_report(HarvestConfig(output_dir=tmp_path), probe=True)

    assert report["ok"] is False
    assert report["probe"]["error"].startswith("ConnectionError")
    assert "source probe: missing" in doctor.format_doctor_report(report)
