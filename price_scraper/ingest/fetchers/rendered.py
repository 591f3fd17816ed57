"""Headless browser fetcher for JavaScript-rendered content (tier 2)."""

import logging
from typing import Optional, Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Response
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from price_scraper.errors import ConfigurationError, NetworkError, RenderError, ScraperError
from price_scraper.ingest.base import BaseFetcher, missing_fields
from price_scraper.ingest.browser import BrowserManager
from price_scraper.ingest.dom_stability import StabilityConfig, wait_for_dom_stability
from price_scraper.ingest.price_parser import parse_price, resolve_image_url
from price_scraper.ingest.selectors import (
    DEFAULT_RULES,
    DOM_EXTRACTION_SCRIPT,
    SelectorRuleSet,
    dom_script_argument,
    first_match,
)
from price_scraper.ingest.stealth_browser import StealthBrowser, stealth_browser
from price_scraper.models import ExtractionConfig, ExtractionMethod, ExtractionResult, ProductData

logger = logging.getLogger(__name__)

DIAGNOSTIC_HEADERS = ("content-type", "server", "cf-ray", "cf-cache-status", "x-frame-options")


class ProductAIExtractor(Protocol):
    """Anything that can extract product data from rendered markup."""

    async def extract(self, url: str, html: str) -> ExtractionResult: ...


class RenderedBrowserFetcher(BaseFetcher):
    """Fetcher using a shared headless browser, falling back to AI extraction."""

    method = ExtractionMethod.RENDERED

    REQUIRED_FIELDS = ["title", "price", "image_url"]

    def __init__(
        self,
        browser_manager: BrowserManager,
        ai_extractor: ProductAIExtractor,
        rules: SelectorRuleSet = DEFAULT_RULES,
        stability: StabilityConfig = StabilityConfig(),
        force_ai: bool = False,
        debug: bool = False,
        stealth: StealthBrowser = stealth_browser,
    ):
        """
        Initialize rendered browser fetcher.

        Args:
            browser_manager: Owner of the shared browser process
            ai_extractor: Fallback used when selectors are insufficient
            rules: Selector rules evaluated against the live DOM
            stability: DOM stability wait settings
            force_ai: Skip selectors and always hand markup to the AI extractor
            debug: Log response diagnostics and HTML previews
            stealth: Stealth helper applied to each page
        """
        self.browser_manager = browser_manager
        self.ai_extractor = ai_extractor
        self.rules = rules
        self.stability = stability
        self.force_ai = force_ai
        self.debug = debug
        self.stealth = stealth

    async def close(self):
        """Close the shared browser (process shutdown only) and the AI client."""
        await self.browser_manager.close()
        close_ai = getattr(self.ai_extractor, "close", None)
        if close_ai is not None:
            await close_ai()

    async def fetch(self, url: str, config: Optional[ExtractionConfig] = None) -> ExtractionResult:
        """
        Render a page and extract product data.

        Args:
            url: Product page URL
            config: Navigation timeout and user agent (30s default)

        Returns:
            ExtractionResult tagged ``rendered``, or the AI extractor's result
            tagged ``ai``. Only ConfigurationError escapes.
        """
        config = config or ExtractionConfig.for_rendered()
        page: Optional[Page] = None

        try:
            browser = await self.browser_manager.get_browser()
            page = await browser.new_page(**self.stealth.get_stealth_context_options(config.user_agent))
            await self.stealth.setup_stealth_page(page)

            response = await self._navigate(page, url, config)
            if self.debug:
                self._log_response(response)

            report = await wait_for_dom_stability(page, self.stability)
            if not report.stable:
                logger.debug(f"Proceeding without confirmed DOM stability for {url}")

            rendered_html = await page.content()
            logger.info(f"Rendered HTML size for {url}: {len(rendered_html)} chars")
            if self.debug:
                await self._log_page(page, rendered_html)

            if self.force_ai:
                logger.info("FORCE_AI_EXTRACTION enabled - skipping selectors, using AI")
                await self._close_page(page)
                page = None
                return await self.ai_extractor.extract(url, rendered_html)

            data = await self._extract_with_selectors(page, url)
            missing = missing_fields(data, self.REQUIRED_FIELDS)
            if missing:
                logger.info(
                    f"Selectors missing {', '.join(missing)} for {url}, trying AI with rendered HTML"
                )
                await self._close_page(page)
                page = None
                return await self.ai_extractor.extract(url, rendered_html)

            logger.info(f"Rendered extraction succeeded for {url}: {data.price} {data.currency}")
            return ExtractionResult.ok(data, self.method)

        except ConfigurationError:
            raise
        except ScraperError as e:
            logger.warning(f"Rendered fetch failed for {url}: {e.kind}: {e}")
            return ExtractionResult.fail(str(e), self.method, e.kind)
        except Exception as e:
            logger.error(f"Rendered fetch failed for {url}: {type(e).__name__}: {e}")
            if self.debug:
                logger.debug("Rendered fetch traceback", exc_info=True)
            return ExtractionResult.fail(str(e) or type(e).__name__, self.method, "RenderError")
        finally:
            if page is not None:
                await self._close_page(page)

    async def _navigate(self, page: Page, url: str, config: ExtractionConfig) -> Optional[Response]:
        """Navigate using DOMContentLoaded; many sites never reach network idle."""
        logger.info(f"Navigating to {url}")
        try:
            return await page.goto(url, wait_until="domcontentloaded", timeout=config.timeout_ms)
        except PlaywrightTimeoutError:
            raise RenderError(url, f"Navigation timeout after {config.timeout_ms}ms")
        except PlaywrightError as e:
            raise NetworkError(url, f"Navigation failed: {e.message}")

    async def _extract_with_selectors(self, page: Page, url: str) -> ProductData:
        """Evaluate the rule set in the page and parse the results."""
        try:
            raw = await page.evaluate(DOM_EXTRACTION_SCRIPT, dom_script_argument(self.rules))
        except PlaywrightError as e:
            raise RenderError(url, f"Selector evaluation failed: {e.message}")

        _, parsed = first_match(raw.get("priceCandidates") or [], parse_price)
        title = (raw.get("title") or "").strip() or None
        _, image_url = first_match(
            raw.get("imageCandidates") or [],
            lambda candidate: resolve_image_url(candidate, url),
        )

        logger.debug(
            f"Selector results - title: {'found' if title else 'null'}, "
            f"price: {'found' if parsed else 'null'}, "
            f"imageUrl: {'found' if image_url else 'null'}"
        )

        return ProductData(
            title=title,
            price=parsed.price if parsed else None,
            currency=parsed.currency if parsed else None,
            image_url=image_url,
        )

    @staticmethod
    async def _close_page(page: Page) -> None:
        try:
            await page.close()
        except Exception as e:
            logger.debug(f"Error closing page: {e}")

    @staticmethod
    def _log_response(response: Optional[Response]) -> None:
        if response is None:
            logger.debug("Response is None (navigation may have been served from cache)")
            return
        headers = response.headers
        logger.debug(f"Response status: {response.status}")
        logger.debug(f"Response URL (after redirects): {response.url}")
        logger.debug(
            "Response headers: "
            + str({name: headers.get(name) for name in DIAGNOSTIC_HEADERS})
        )

    @staticmethod
    async def _log_page(page: Page, rendered_html: str) -> None:
        if len(rendered_html) < 2000:
            logger.debug(f"HTML content (full - small response): {rendered_html}")
        else:
            logger.debug(f"HTML preview (first 500 chars): {rendered_html[:500]}")
            logger.debug(f"HTML preview (last 500 chars): {rendered_html[-500:]}")
        try:
            logger.debug(f"Page title: {await page.title()}")
        except PlaywrightError as e:
            logger.debug(f"Could not read page title: {e.message}")
        logger.debug(f"Current URL: {page.url}")
