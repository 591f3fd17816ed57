"""Extraction tier fetchers."""

from price_scraper.ingest.fetchers.rendered import RenderedBrowserFetcher
from price_scraper.ingest.fetchers.static import StaticHTMLFetcher

__all__ = ["RenderedBrowserFetcher", "StaticHTMLFetcher"]
