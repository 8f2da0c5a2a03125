"""Dated JSON snapshot persistence."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Protocol, Union

from .records import QuoteRecord, Snapshot

logger = logging.getLogger(__name__)

_DATE_KEY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SnapshotWriter(Protocol):
    def write(self, date_key: str, snapshot: Snapshot) -> Path:
        ...


def snapshot_path(output_dir: Path, date_key: str) -> Path:
    if not _DATE_KEY.match(date_key or ""):
        raise ValueError(f"Invalid snapshot date key: {date_key!r} (expected YYYY-MM-DD)")
    return Path(output_dir) / f"{date_key}.json"


class JsonSnapshotWriter:
    """Write ``<output_dir>/<YYYY-MM-DD>.json``, replacing any same-day document."""

    def __init__(self, output_dir: Union[str, Path]) -> None:
        self.output_dir = Path(output_dir)

    def write(self, date_key: str, snapshot: Snapshot) -> Path:
        path = snapshot_path(self.output_dir, date_key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(snapshot.to_dict(), ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
        logger.info("snapshot saved to %s (%d quotes)", path, snapshot.total_records)
        return path


def load_snapshot(path: Path) -> Dict[str, List[QuoteRecord]]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} is not a snapshot object")
    snapshot: Dict[str, List[QuoteRecord]] = {}
    for category, rows in data.items():
        if not isinstance(rows, list):
            raise ValueError(f"{path}: category {category!r} is not a list")
        snapshot[category] = [QuoteRecord.from_dict(row) for row in rows if isinstance(row, dict)]
    return snapshot


__all__ = ["SnapshotWriter", "JsonSnapshotWriter", "snapshot_path", "load_snapshot"]
