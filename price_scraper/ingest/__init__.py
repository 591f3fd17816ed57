"""Fetch tiers, selector rules and price parsing."""

from price_scraper.ingest.browser import BrowserManager
from price_scraper.ingest.price_parser import ParsedPrice, parse_price, resolve_image_url
from price_scraper.ingest.selectors import DEFAULT_RULES, SelectorRuleSet

__all__ = [
    "BrowserManager",
    "DEFAULT_RULES",
    "ParsedPrice",
    "SelectorRuleSet",
    "parse_price",
    "resolve_image_url",
]
