"""AI-powered product extraction from rendered HTML (tier 3)."""

import logging
import re
from typing import Optional

from price_scraper.ai.html_preparer import prepare_html_for_ai
from price_scraper.ai.llm_service import StructuredLLMClient, create_llm_client
from price_scraper.ai.prompts import ProductExtraction, build_extraction_prompt
from price_scraper.config import Settings, settings as default_settings
from price_scraper.errors import AIExtractionError
from price_scraper.ingest.price_parser import resolve_image_url, to_minor_units
from price_scraper.models import ExtractionMethod, ExtractionResult, ProductData

logger = logging.getLogger(__name__)

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


class AIExtractor:
    """
    Extracts product data with a structured-output language model.

    Used by the rendered fetcher when selectors come up short. The model
    client is created on first use, so a missing model setting surfaces as a
    ConfigurationError from ``extract``.
    """

    method = ExtractionMethod.AI

    def __init__(
        self,
        config: Optional[Settings] = None,
        client: Optional[StructuredLLMClient] = None,
    ):
        self.config = config or default_settings
        self._client = client

    def _get_client(self) -> StructuredLLMClient:
        if self._client is None:
            self._client = create_llm_client(self.config)
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.close()

    async def extract(self, url: str, html: str) -> ExtractionResult:
        """
        Extract product data from fully rendered HTML.

        Args:
            url: Product URL (context for the prompt and image resolution)
            html: Rendered page markup

        Returns:
            ExtractionResult tagged ``ai``

        Raises:
            ConfigurationError: The selected provider has no model configured
        """
        client = self._get_client()

        try:
            excerpt = prepare_html_for_ai(
                html,
                max_chars=self.config.ai_max_html_chars,
                min_content_length=self.config.ai_min_content_length,
            )
            logger.info(f"Sending {len(excerpt)} chars to {client.provider} for {url}")

            extraction = await client.generate(build_extraction_prompt(url, excerpt))
            logger.debug(f"AI response for {url}: {extraction.model_dump()}")

            data = self._to_product_data(extraction, url)
            if not data.title and data.price is None:
                logger.warning(f"AI extraction found no title or price for {url}")
                return ExtractionResult.fail(
                    "AI extraction failed: no title or price found in HTML",
                    self.method,
                    AIExtractionError.__name__,
                )

            logger.info(f"AI extraction succeeded for {url}: {data.price} {data.currency}")
            return ExtractionResult.ok(data, self.method)

        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"AI extraction error for {url}: {type(e).__name__}: {message}")
            return ExtractionResult.fail(
                f"AI extraction error: {message}",
                self.method,
                AIExtractionError.__name__,
            )

    @staticmethod
    def _to_product_data(extraction: ProductExtraction, url: str) -> ProductData:
        """Normalize model output to the result invariants."""
        title = extraction.title.strip() if extraction.title else None

        price = to_minor_units(extraction.price)
        if extraction.price is not None and price is None:
            logger.debug(f"Dropping unusable AI price: {extraction.price!r}")

        currency = (extraction.currency or "").strip().upper() or None
        if currency and not _CURRENCY_RE.match(currency):
            logger.debug(f"Dropping non-ISO currency from AI: {currency!r}")
            currency = None

        return ProductData(
            title=title or None,
            price=price,
            currency=currency,
            image_url=resolve_image_url(extraction.imageUrl, url),
        )
