from html import escape
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union
from urllib.parse import parse_qs, unquote, urlparse

import pytest

from quote_harvest.workflows.errors import NetworkError


def _render_quote(quote: Union[Tuple[str, str], Tuple[str, str, Sequence[str]]]) -> str:
    text, author = quote[0], quote[1]
    tags = quote[2] if len(quote) > 2 else ()
    tag_html = "".join(f'<a class="tag" href="#">{escape(tag)}</a>' for tag in tags)
    return (
        '<div class="quote-container">'
        f'<p class="quote-text">{escape(text)}</p>'
        f'<span class="author">— {escape(author)}</span>'
        f'<div class="tags">{tag_html}</div>'
        "</div>"
    )


def render_page(quotes: Iterable, page: int = 1, total: Optional[int] = 1) -> str:
    body = "".join(_render_quote(q) for q in quotes)
    indicator = f'<div class="pagination-info">Page {page} of {total}</div>' if total is not None else ""
    return f"<html><body><main>{body}</main>{indicator}</body></html>"


def quotes_for(category: str, page: int, count: int = 10) -> List[Tuple[str, str, List[str]]]:
    return [
        (f"{category} quote {page}-{idx} about life.", f"Author {page}-{idx}", [category])
        for idx in range(count)
    ]


class FakeTransport:
    """In-memory transport keyed by (category, page); records every request."""

    def __init__(
        self,
        pages: Optional[Dict[Tuple[str, int], Union[str, Exception]]] = None,
        *,
        fail_categories: Iterable[str] = (),
        events: Optional[list] = None,
    ) -> None:
        self.pages = dict(pages or {})
        self.fail_categories = set(fail_categories)
        self.calls: List[Tuple[str, int]] = []
        self.headers: List[Optional[dict]] = []
        self.events = events if events is not None else []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def fetch(self, url, headers=None, timeout=None):
        parsed = urlparse(url)
        category = unquote(parsed.path.rstrip("/").rsplit("/", 1)[-1])
        page = int(parse_qs(parsed.query)["page"][0])
        self.calls.append((category, page))
        self.headers.append(headers)
        self.events.append(("fetch", category, page))
        if category in self.fail_categories:
            raise NetworkError(url, "connection refused")
        payload = self.pages.get((category, page))
        if payload is None:
            raise NetworkError(url, "non-success status", status=404)
        if isinstance(payload, Exception):
            raise payload
        return payload


class RecordingSleep:
    def __init__(self, events: Optional[list] = None) -> None:
        self.delays: List[float] = []
        self.events = events if events is not None else []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        self.events.append(("sleep", delay))


@pytest.fixture
def page_html():
    return render_page


@pytest.fixture
def page_quotes():
    return quotes_for


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def recording_sleep():
    return RecordingSleep
