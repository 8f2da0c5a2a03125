from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..core.keys import K_AUTHOR, K_CATEGORY, K_TAGS, K_TEXT

STATUS_OK = "ok"
STATUS_PARTIAL = "partial"
STATUS_EMPTY = "empty"


@dataclass(frozen=True)
class QuoteRecord:
    """One harvested quote. ``text`` and ``author`` are never empty."""

    text: str
    author: str
    category: str
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            K_TEXT: self.text,
            K_AUTHOR: self.author,
            K_CATEGORY: self.category,
            K_TAGS: list(self.tags),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "QuoteRecord":
        return cls(
            text=str(payload.get(K_TEXT) or ""),
            author=str(payload.get(K_AUTHOR) or ""),
            category=str(payload.get(K_CATEGORY) or ""),
            tags=tuple(str(tag) for tag in payload.get(K_TAGS) or ()),
        )


@dataclass
class CategoryResult:
    """Records harvested for one category plus harvest diagnostics.

    Only ``records`` is persisted; the remaining fields feed the run summary.
    """

    category: str
    records: List[QuoteRecord] = field(default_factory=list)
    total_pages: int = 0
    pages_requested: List[int] = field(default_factory=list)
    pages_fetched: int = 0
    raw_count: int = 0
    duplicates_dropped: int = 0
    trimmed: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if not self.records:
            return STATUS_EMPTY
        if self.errors:
            return STATUS_PARTIAL
        return STATUS_OK

    def to_summary(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "status": self.status,
            "records": len(self.records),
            "total_pages": self.total_pages,
            "pages_requested": list(self.pages_requested),
            "pages_fetched": self.pages_fetched,
            "raw_count": self.raw_count,
            "duplicates_dropped": self.duplicates_dropped,
            "trimmed": self.trimmed,
            "errors": list(self.errors),
        }


@dataclass
class Snapshot:
    """Per-run output: category -> CategoryResult, in configuration order."""

    date_key: str
    results: Dict[str, CategoryResult] = field(default_factory=dict)
    path: Optional[str] = None

    def records_for(self, category: str) -> List[QuoteRecord]:
        result = self.results.get(category)
        return list(result.records) if result else []

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            category: [record.to_dict() for record in result.records]
            for category, result in self.results.items()
        }

    @property
    def total_records(self) -> int:
        return sum(len(result.records) for result in self.results.values())


__all__ = [
    "QuoteRecord",
    "CategoryResult",
    "Snapshot",
    "STATUS_OK",
    "STATUS_PARTIAL",
    "STATUS_EMPTY",
]
