"""Stable identity for a quote, used for intra-run deduplication only."""

from __future__ import annotations

from .harvest_config import FINGERPRINT_PREFIX_CHARS


def _normalize(value: str) -> str:
    lowered = (value or "").lower()
    kept = "".join(ch for ch in lowered if ch.isalnum() or ch.isspace())
    return " ".join(kept.split())


def fingerprint(text: str, author: str, *, prefix_chars: int = FINGERPRINT_PREFIX_CHARS) -> str:
    """Return the dedup key for ``(text, author)``.

    Lowercased text with everything but letters, digits and spaces removed,
    truncated to ``prefix_chars``, joined with the lowercased author. Case,
    punctuation and whitespace variants of the same quote share a key.
    """

    body = _normalize(text)[: max(1, prefix_chars)].rstrip()
    who = " ".join((author or "").lower().split())
    return f"{body}::{who}"


def sanity_check() -> None:
    assert fingerprint("Hello, World!", "Ann") == fingerprint("hello world", "ANN")
    assert fingerprint("a  b", "x") == fingerprint("a b", " x ")
    assert fingerprint("one", "x") != fingerprint("two", "x")


sanity_check()

__all__ = ["fingerprint", "sanity_check"]
