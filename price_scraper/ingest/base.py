"""Base fetcher interface for extraction tiers."""

from abc import ABC, abstractmethod
from typing import List, Optional

from price_scraper.ingest.price_parser import parse_price, resolve_image_url
from price_scraper.ingest.selectors import RawFields
from price_scraper.models import ExtractionConfig, ExtractionMethod, ExtractionResult, ProductData


class BaseFetcher(ABC):
    """Abstract base class for a tier of the extraction pipeline."""

    method: ExtractionMethod

    @abstractmethod
    async def fetch(self, url: str, config: Optional[ExtractionConfig] = None) -> ExtractionResult:
        """
        Extract product data from a URL.

        Args:
            url: Product page URL
            config: Timeout and user agent for this call (tier default if None)

        Returns:
            ExtractionResult; data and network failures are returned, not raised
        """

    async def close(self) -> None:
        """Release resources held by the fetcher."""


def build_product_data(raw: RawFields, base_url: str) -> ProductData:
    """Parse raw selector output into typed product data."""
    parsed = parse_price(raw.price_text) if raw.price_text else None
    return ProductData(
        title=raw.title.strip() if raw.title else None,
        price=parsed.price if parsed else None,
        currency=parsed.currency if parsed else None,
        image_url=resolve_image_url(raw.image_url, base_url),
    )


FIELD_LABELS = {"image_url": "imageUrl"}


def missing_fields(data: ProductData, required: List[str]) -> List[str]:
    """Wire names of required fields that are empty in ``data``."""
    return [
        FIELD_LABELS.get(name, name)
        for name in required
        if getattr(data, name) in (None, "")
    ]
