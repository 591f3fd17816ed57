"""Tests for HTML preparation before model calls."""

from price_scraper.ai.html_preparer import TRUNCATION_MARKER, prepare_html_for_ai, truncate_text


def test_removes_scripts_and_styles_but_keeps_json_ld():
    """Test noise removal with structured product data preserved."""
    html = """
    <html><head><style>.x{color:red}</style></head><body>
      <script>window.tracking = true;</script>
      <script type="application/ld+json">{"@type": "Product", "name": "Widget"}</script>
      <noscript>Enable JS</noscript>
      <h1>Widget</h1>
    </body></html>
    """
    excerpt = prepare_html_for_ai(html, min_content_length=0)

    assert "window.tracking" not in excerpt
    assert "color:red" not in excerpt
    assert "Enable JS" not in excerpt
    assert '"@type": "Product"' in excerpt
    assert "Widget" in excerpt


def test_prefers_main_container_with_enough_content():
    """Test that a large <main> is used instead of the whole body."""
    filler = "product details " * 300
    html = f"<body><nav>Site menu</nav><main><h1>Widget</h1><p>{filler}</p></main></body>"
    excerpt = prepare_html_for_ai(html)

    assert excerpt.startswith("<main>")
    assert "Site menu" not in excerpt


def test_small_main_falls_back_to_body():
    """Test that a thin <main> is skipped for the body."""
    html = "<body><nav>Site menu</nav><main><h1>Widget</h1></main></body>"
    excerpt = prepare_html_for_ai(html)

    assert "Site menu" in excerpt
    assert "Widget" in excerpt


def test_whitespace_is_collapsed():
    """Test whitespace normalization."""
    excerpt = prepare_html_for_ai("<body><p>a\n\n   b\t\tc</p></body>")
    assert "a b c" in excerpt


def test_excerpt_never_exceeds_budget():
    """Test the hard character budget including the truncation marker."""
    html = "<body>" + "<p>widget</p>" * 10000 + "</body>"
    excerpt = prepare_html_for_ai(html, max_chars=1000)

    assert len(excerpt) <= 1000
    assert excerpt.endswith(TRUNCATION_MARKER)


def test_truncate_text_edge_cases():
    """Test truncation below and at the marker length."""
    assert truncate_text("short", 100) == "short"
    assert truncate_text("abcdefghij", 5) == "abcde"
    assert len(truncate_text("x" * 50, 20)) == 20


def test_empty_html():
    """Test that empty input yields an empty excerpt."""
    assert prepare_html_for_ai("") == ""
    assert prepare_html_for_ai(None) == ""
