"""Tiered product data extraction: static HTML, rendered browser, then AI."""

from price_scraper.errors import (
    AIExtractionError,
    ConfigurationError,
    NetworkError,
    ParseError,
    RenderError,
    ScraperError,
)
from price_scraper.ingest.price_parser import parse_price
from price_scraper.models import ExtractionConfig, ExtractionMethod, ExtractionResult, ProductData
from price_scraper.scraper import PipelineOptions, ProductScraper

__version__ = "0.1.0"

__all__ = [
    "AIExtractionError",
    "ConfigurationError",
    "ExtractionConfig",
    "ExtractionMethod",
    "ExtractionResult",
    "NetworkError",
    "ParseError",
    "PipelineOptions",
    "ProductData",
    "ProductScraper",
    "RenderError",
    "ScraperError",
    "parse_price",
]
