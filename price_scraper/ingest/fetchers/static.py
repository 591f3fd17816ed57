"""Static HTML fetcher for server-rendered product pages (tier 1)."""

import asyncio
import logging
from typing import Optional

import httpx
from selectolax.parser import HTMLParser

from price_scraper.errors import NetworkError, ParseError, ScraperError
from price_scraper.ingest.base import BaseFetcher, build_product_data, missing_fields
from price_scraper.ingest.price_parser import parse_price, resolve_image_url
from price_scraper.ingest.selectors import DEFAULT_RULES, SelectorRuleSet, extract_raw_fields
from price_scraper.models import ExtractionConfig, ExtractionMethod, ExtractionResult, ProductData

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Upgrade-Insecure-Requests": "1",
}


class StaticHTMLFetcher(BaseFetcher):
    """Fetcher for pages whose product data is present in the served HTML."""

    method = ExtractionMethod.STATIC

    # Title is optional for this tier
    REQUIRED_FIELDS = ["price", "currency", "image_url"]

    def __init__(
        self,
        rules: SelectorRuleSet = DEFAULT_RULES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize static HTML fetcher.

        Args:
            rules: Selector rules evaluated against the downloaded markup
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.rules = rules
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                headers=DEFAULT_HEADERS,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str, config: Optional[ExtractionConfig] = None) -> ExtractionResult:
        """
        Download a page and extract product data with selector rules.

        Args:
            url: Product page URL
            config: Timeout and user agent (10s default)

        Returns:
            ExtractionResult tagged ``static``; never raises
        """
        config = config or ExtractionConfig.for_static()

        try:
            html = await self._download(url, config)
            data = self.parse(html, url)

            missing = missing_fields(data, self.REQUIRED_FIELDS)
            if missing:
                raise ParseError(url, missing)

            logger.info(f"Static extraction succeeded for {url}: {data.price} {data.currency}")
            return ExtractionResult.ok(data, self.method)

        except ScraperError as e:
            logger.warning(f"Static fetch failed for {url}: {e.kind}: {e}")
            return ExtractionResult.fail(str(e), self.method, e.kind)
        except Exception as e:
            logger.error(f"Static fetch failed for {url}: {type(e).__name__}: {e}")
            return ExtractionResult.fail(str(e) or type(e).__name__, self.method)

    async def _download(self, url: str, config: ExtractionConfig) -> str:
        """GET the page with a hard timeout covering the whole request."""
        client = await self._get_client()
        timeout_s = config.timeout_ms / 1000

        try:
            response = await asyncio.wait_for(
                client.get(url, headers={"User-Agent": config.user_agent}, timeout=timeout_s),
                timeout=timeout_s,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError):
            raise NetworkError(url, f"Request timeout after {config.timeout_ms}ms")
        except httpx.HTTPError as e:
            raise NetworkError(url, str(e) or type(e).__name__)

        if not response.is_success:
            raise NetworkError(
                url,
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        logger.debug(f"Downloaded {len(response.text)} chars from {url}")
        return response.text

    def parse(self, html: str, url: str) -> ProductData:
        """Evaluate the selector rules against markup."""
        parser = HTMLParser(html)
        raw = extract_raw_fields(
            parser,
            self.rules,
            price_accepts=lambda text: parse_price(text) is not None,
            resolve_image=lambda raw: resolve_image_url(raw, url),
        )
        return build_product_data(raw, url)
