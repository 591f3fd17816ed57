"""Declarative selector rules for product fields.

Rules are ordered CSS selectors per field, evaluated first-match-wins. The
same rule set drives the static parser (selectolax) and the rendered DOM
(one ``page.evaluate`` call), so new site rules are added here only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional, Tuple, TypeVar

from selectolax.parser import HTMLParser, Node

logger = logging.getLogger(__name__)

T = TypeVar("T")

IMAGE_ATTRIBUTES = ("src", "data-src", "data-old-hires", "content")


@dataclass(frozen=True)
class SelectorRuleSet:
    """Ordered selectors for title, price and image."""

    title: Tuple[str, ...]
    price: Tuple[str, ...]
    image: Tuple[str, ...]

    def extend(
        self,
        title: Iterable[str] = (),
        price: Iterable[str] = (),
        image: Iterable[str] = (),
    ) -> "SelectorRuleSet":
        """Return a copy with extra lower-priority selectors appended."""
        return replace(
            self,
            title=self.title + tuple(title),
            price=self.price + tuple(price),
            image=self.image + tuple(image),
        )

    def as_dict(self) -> dict:
        return {"title": list(self.title), "price": list(self.price), "image": list(self.image)}


DEFAULT_RULES = SelectorRuleSet(
    title=(
        'h1[data-testid="product-title"]',
        "#productTitle",  # Amazon
        "h1.product-title",
        'h1[itemprop="name"]',
        ".product-name h1",
        ".product_main h1",
        "h1",
    ),
    price=(
        '[data-testid="price"]',
        ".price-current",
        "#priceblock_ourprice",  # Amazon
        "#priceblock_dealprice",  # Amazon deals
        ".a-price .a-offscreen",  # Amazon new layout
        ".product-price",
        '[itemprop="price"]',
        ".price_color",
        ".price",
    ),
    image=(
        "#landingImage",  # Amazon
        "#imgTagWrapperId img",
        '[data-testid="product-image"] img',
        ".product-image img",
        '[itemprop="image"]',
        ".thumbnail img",
        ".gallery img:first-child",
        ".product_gallery img",
    ),
)


@dataclass(frozen=True)
class RawFields:
    """Unparsed field values as found in the markup."""

    title: Optional[str] = None
    price_text: Optional[str] = None
    image_url: Optional[str] = None


def first_match(
    selectors: Iterable[str],
    lookup: Callable[[str], Optional[T]],
) -> Tuple[Optional[str], Optional[T]]:
    """
    Try selectors in priority order and return the first usable value.

    Args:
        selectors: CSS selectors in priority order
        lookup: Returns a value for a selector, or None to try the next one

    Returns:
        Tuple of (matched_selector, value) or (None, None)
    """
    selectors = list(selectors)
    for i, selector in enumerate(selectors):
        try:
            value = lookup(selector)
        except Exception as e:
            logger.debug(f"Selector {i+1}/{len(selectors)} error: {selector[:50]} - {e}")
            continue
        if value is not None:
            logger.debug(f"Selector {i+1}/{len(selectors)} matched: {selector[:50]}")
            return selector, value
    return None, None


def node_text(node: Optional[Node]) -> Optional[str]:
    if node is None:
        return None
    text = node.text(strip=True)
    return text or None


def node_image(
    node: Optional[Node],
    resolve: Callable[[str], Optional[str]] = lambda raw: raw,
) -> Optional[str]:
    """First image attribute value that ``resolve`` accepts."""
    if node is None:
        return None
    for attr in IMAGE_ATTRIBUTES:
        value = (node.attributes.get(attr) or "").strip()
        if not value:
            continue
        resolved = resolve(value)
        if resolved:
            return resolved
    return None


def extract_raw_fields(
    parser: HTMLParser,
    rules: SelectorRuleSet = DEFAULT_RULES,
    price_accepts: Callable[[str], bool] = lambda text: True,
    resolve_image: Callable[[str], Optional[str]] = lambda raw: raw,
) -> RawFields:
    """
    Evaluate a rule set against parsed markup.

    Args:
        parser: selectolax parser over the page
        rules: Selector rules to evaluate
        price_accepts: Price candidates rejected by this predicate are skipped
        resolve_image: Maps an attribute value to a usable URL, or None to keep looking

    Returns:
        RawFields with the first usable value per field
    """
    _, title = first_match(rules.title, lambda s: node_text(parser.css_first(s)))

    def price_lookup(selector: str) -> Optional[str]:
        text = node_text(parser.css_first(selector))
        return text if text and price_accepts(text) else None

    _, price_text = first_match(rules.price, price_lookup)
    _, image_url = first_match(rules.image, lambda s: node_image(parser.css_first(s), resolve_image))

    return RawFields(title=title, price_text=price_text, image_url=image_url)


# Runs in the page; mirrors extract_raw_fields for the live DOM. Price and image
# candidates are returned in rule order so they can be validated in Python.
DOM_EXTRACTION_SCRIPT = """
(rules) => {
    const query = (sel) => {
        try {
            return document.querySelector(sel);
        } catch (e) {
            return null;
        }
    };
    const text = (el) => (el.textContent || "").trim() || null;
    let title = null;
    for (const sel of rules.title) {
        const el = query(sel);
        title = el ? text(el) : null;
        if (title) break;
    }
    const imageCandidates = [];
    for (const sel of rules.image) {
        const el = query(sel);
        if (!el) continue;
        for (const attr of rules.imageAttributes) {
            const value = (el.getAttribute(attr) || "").trim();
            if (value) imageCandidates.push(value);
        }
    }
    return {
        title: title,
        priceCandidates: rules.price.map((sel) => {
            const el = query(sel);
            return el ? text(el) : null;
        }).filter((value) => value),
        imageCandidates: imageCandidates,
    };
}
"""


def dom_script_argument(rules: SelectorRuleSet = DEFAULT_RULES) -> dict:
    """Serialize a rule set for DOM_EXTRACTION_SCRIPT."""
    payload = rules.as_dict()
    payload["imageAttributes"] = list(IMAGE_ATTRIBUTES)
    return payload
