"""Command line entry point: scrape a single product URL."""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from price_scraper.config import Settings, settings
from price_scraper.errors import ConfigurationError
from price_scraper.logging_config import setup_logging
from price_scraper.models import ExtractionConfig, ExtractionResult
from price_scraper.scraper import ProductScraper

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="price-scraper",
        description="Extract title, price, currency and image from a product page",
    )
    parser.add_argument("url", help="Product page URL")
    parser.add_argument(
        "--force-ai",
        action="store_true",
        help="Skip static fetch and selectors, send rendered HTML to the model",
    )
    parser.add_argument(
        "--skip-static",
        action="store_true",
        help="Start at the rendered-browser tier",
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        default=None,
        help="Timeout applied to every tier (default: 10000 static, 30000 rendered)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    return parser


def build_settings(args: argparse.Namespace, base: Settings = settings) -> Settings:
    """Copy of the loaded settings with command line overrides applied."""
    overrides = {}
    if args.force_ai:
        overrides["force_ai_extraction"] = True
    if args.skip_static:
        overrides["skip_static_tier"] = True
    return base.model_copy(update=overrides)


def check_settings(config: Settings) -> None:
    """Log AI configuration problems at startup."""
    missing, warnings = config.validate_ai_settings()
    for warning in warnings:
        logger.warning(warning)
    for item in missing:
        logger.warning(f"Missing setting: {item}")
    if missing:
        logger.warning("AI extraction will fail until the settings above are provided")


def format_result(result: ExtractionResult) -> str:
    if not result.success or result.data is None:
        return f"FAILED ({result.method.value}): {result.error}"

    data = result.data
    price = f"{data.price / 100:.2f}" if data.price is not None else "-"
    return "\n".join([
        f"Method:   {result.method.value}",
        f"Title:    {data.title or '-'}",
        f"Price:    {price} {data.currency or ''}".rstrip(),
        f"Image:    {data.image_url or '-'}",
    ])


async def run(url: str, config: Settings, timeout_ms: Optional[int] = None) -> ExtractionResult:
    extraction_config = None
    if timeout_ms is not None:
        extraction_config = ExtractionConfig(timeout_ms=timeout_ms, user_agent=config.user_agent)

    async with ProductScraper.from_settings(config) as scraper:
        return await scraper.scrape_product(url, extraction_config)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = build_settings(args)

    setup_logging(config)
    check_settings(config)

    try:
        result = asyncio.run(run(args.url, config, args.timeout_ms))
    except ConfigurationError as e:
        logger.error(f"Configuration error ({e.setting}): {e}")
        return 2

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_result(result))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
