"""Tests for selector rules evaluation."""

from selectolax.parser import HTMLParser

from price_scraper.ingest.price_parser import parse_price, resolve_image_url
from price_scraper.ingest.selectors import (
    DEFAULT_RULES,
    SelectorRuleSet,
    dom_script_argument,
    extract_raw_fields,
    first_match,
)


def test_first_match_returns_first_non_empty_value():
    """Test priority order and skipping of empty lookups."""
    values = {"a": None, "b": "second", "c": "third"}
    assert first_match(["a", "b", "c"], values.get) == ("b", "second")


def test_first_match_skips_failing_selectors():
    """Test that a selector raising an error does not abort the search."""

    def lookup(selector):
        if selector == "bad":
            raise ValueError("invalid selector")
        return "ok"

    assert first_match(["bad", "good"], lookup) == ("good", "ok")
    assert first_match([], lookup) == (None, None)


def test_extend_appends_lower_priority_selectors():
    """Test that site rules are added after the defaults."""
    rules = DEFAULT_RULES.extend(price=[".site-price"])
    assert rules.price[-1] == ".site-price"
    assert rules.price[:-1] == DEFAULT_RULES.price
    assert rules.title == DEFAULT_RULES.title


def test_extract_raw_fields_uses_image_attribute_fallbacks():
    """Test title, price and data-src image extraction."""
    html = """
    <html><body>
      <h1 class="product-title">  Blue Widget  </h1>
      <span class="price">$19.99</span>
      <div class="product-image"><img data-src="/img/widget.jpg"></div>
    </body></html>
    """
    raw = extract_raw_fields(HTMLParser(html))
    assert raw.title == "Blue Widget"
    assert raw.price_text == "$19.99"
    assert raw.image_url == "/img/widget.jpg"


def test_extract_raw_fields_skips_unparseable_price_candidates():
    """Test that a price element without a usable price falls through."""
    html = """
    <div class="product-price">Call for price</div>
    <span class="price">£5.00</span>
    """
    raw = extract_raw_fields(
        HTMLParser(html),
        price_accepts=lambda text: parse_price(text) is not None,
    )
    assert raw.price_text == "£5.00"


def test_dom_script_argument_includes_rules_and_attributes():
    """Test serialization of a rule set for in-page evaluation."""
    rules = SelectorRuleSet(title=("h1",), price=(".price",), image=("img",))
    argument = dom_script_argument(rules)
    assert argument["title"] == ["h1"]
    assert argument["price"] == [".price"]
    assert argument["image"] == ["img"]
    assert "data-src" in argument["imageAttributes"]


def test_extract_raw_fields_tries_next_attribute_and_selector_for_images():
    """Test that unusable image values do not end the image search."""
    html = """
    <div class="product-image">
      <img src="data:image/gif;base64,AAAA" data-src="javascript:void(0)">
    </div>
    <div class="thumbnail"><img src="data:image/gif;base64,AAAA" data-src="/lazy.jpg"></div>
    """
    raw = extract_raw_fields(
        HTMLParser(html),
        resolve_image=lambda value: resolve_image_url(value, "https://shop.example/p"),
    )
    assert raw.image_url == "https://shop.example/lazy.jpg"
