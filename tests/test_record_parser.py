from quote_harvest.workflows.record_parser import (
    Selectors,
    load_document,
    parse_quotes,
    strip_attribution,
)


def test_parse_quotes_extracts_fields_in_dom_order(page_html):
    html = page_html(
        [
            ("First quote.", "Ann Author", ["life", "hope"]),
            ("Second quote.", "Bob Writer"),
        ]
    )
    records = parse_quotes(load_document(html), "daily")
    assert [r.text for r in records] == ["First quote.", "Second quote."]
    assert records[0].author == "Ann Author"
    assert records[0].tags == ("life", "hope")
    assert records[1].tags == ()
    assert {r.category for r in records} == {"daily"}


def test_parse_quotes_skips_incomplete_containers():
    html = """
    <html><body>
      <div class="quote-container"><p class="quote-text">No author here.</p></div>
      <div class="quote-container"><span class="author">— Lonely Author</span></div>
      <div class="quote-container"><p class="quote-text">   </p><span class="author">—   </span></div>
      <div class="quote-container"><p class="quote-text">Kept.</p><span class="author">Kim</span></div>
    </body></html>
    """
    records = parse_quotes(load_document(html), "love")
    assert len(records) == 1
    assert records[0].text == "Kept."
    assert all(r.text and r.author for r in records)


def test_parse_quotes_collapses_markup_whitespace():
    html = """
    <div class="quote-container">
      <p class="quote-text">
        Keep   going,
        <em>always</em>.
      </p>
      <span class="author">
        &#8212; Jo
      </span>
      <a class="tag"> grit </a><a class="tag"> </a>
    </div>
    """
    (record,) = parse_quotes(load_document(html), "strength")
    assert record.text == "Keep going, always ."
    assert record.author == "Jo"
    assert record.tags == ("grit",)


def test_strip_attribution_markers():
    assert strip_attribution("— Maya Angelou") == "Maya Angelou"
    assert strip_attribution("–Maya") == "Maya"
    assert strip_attribution("• Lao Tzu") == "Lao Tzu"
    assert strip_attribution("Jean-Paul Sartre") == "Jean-Paul Sartre"


def test_parse_quotes_custom_selectors():
    html = '<div class="q"><span class="t">Hi.</span><b class="a">Me</b><i class="k">x</i></div>'
    selectors = Selectors(container=".q", text=".t", author=".a", tag=".k")
    (record,) = parse_quotes(load_document(html), "daily", selectors)
    assert (record.text, record.author, record.tags) == ("Hi.", "Me", ("x",))


def test_parse_quotes_empty_page():
    assert parse_quotes(load_document(""), "daily") == []
