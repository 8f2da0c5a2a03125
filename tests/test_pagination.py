import pytest

from quote_harvest.workflows.errors import MalformedPageError
from quote_harvest.workflows.pagination import parse_page_count, resolve_total_pages
from quote_harvest.workflows.record_parser import load_document


def test_parse_page_count_reads_total():
    assert parse_page_count("Page 2 of 7") == 7
    assert parse_page_count("showing PAGE 1 OF 12 pages") == 12


def test_parse_page_count_rejects_missing_indicator():
    with pytest.raises(MalformedPageError):
        parse_page_count("")
    with pytest.raises(MalformedPageError):
        parse_page_count("Next page")
    with pytest.raises(MalformedPageError):
        parse_page_count("Page 1 of 0")


def test_resolve_total_pages_from_document(page_html):
    doc = load_document(page_html([], page=2, total=7))
    assert resolve_total_pages(doc, cap=20) == 7


def test_resolve_total_pages_defaults_to_one(page_html):
    assert resolve_total_pages(load_document(page_html([], total=None))) == 1
    html = '<div class="pagination-info">Page ? of ?</div>'
    assert resolve_total_pages(load_document(html)) == 1


def test_resolve_total_pages_applies_cap(page_html):
    doc = load_document(page_html([], total=5000))
    assert resolve_total_pages(doc, cap=20) == 20
    assert resolve_total_pages(doc, cap=None) == 5000


def test_parse_page_count_accepts_grouped_totals():
    assert parse_page_count("Page 1 of 1,234") == 1234
    assert parse_page_count("Page 3 of 2.500") == 2500
    assert parse_page_count("Page 1 of 12 pages") == 12


def test_resolve_total_pages_caps_grouped_totals():
    html = '<div class="pagination-info">Page 1 of 1,234</div>'
    assert resolve_total_pages(load_document(html), cap=20) == 20
