"""Error kinds raised inside the harvest pipeline.

Transport and page-level failures are absorbed at the category harvest
boundary; nothing above it observes these exceptions.
"""

from __future__ import annotations

from typing import Optional


class HarvestError(Exception):
    """Base class for harvest pipeline errors."""


class NetworkError(HarvestError):
    """A page fetch failed: timeout, connection failure or non-success status."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        self.url = url
        self.reason = reason
        self.status = status
        detail = f"status {status}: {reason}" if status is not None else reason
        super().__init__(f"{url}: {detail}")


class MalformedPageError(HarvestError):
    """The pagination indicator is absent or cannot be parsed."""


def describe_error(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


__all__ = [
    "HarvestError",
    "NetworkError",
    "MalformedPageError",
    "describe_error",
]
