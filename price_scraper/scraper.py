"""Tiered product scraper: static HTML, rendered browser, then AI."""

from dataclasses import dataclass
from typing import Optional

from price_scraper.ai.extractor import AIExtractor
from price_scraper.config import Settings, settings as default_settings
from price_scraper.ingest.base import BaseFetcher
from price_scraper.ingest.browser import BrowserManager
from price_scraper.ingest.dom_stability import StabilityConfig
from price_scraper.ingest.fetchers.rendered import RenderedBrowserFetcher
from price_scraper.ingest.fetchers.static import StaticHTMLFetcher
from price_scraper.ingest.selectors import DEFAULT_RULES, SelectorRuleSet
from price_scraper.logging_config import get_logger
from price_scraper.models import ExtractionConfig, ExtractionResult


@dataclass(frozen=True)
class PipelineOptions:
    """Debug switches that change which tiers run."""

    force_ai: bool = False
    skip_static: bool = False
    debug: bool = False

    @classmethod
    def from_settings(cls, config: Settings) -> "PipelineOptions":
        return cls(
            force_ai=config.force_ai_extraction,
            skip_static=config.skip_static_tier,
            debug=config.debug_log,
        )


class ProductScraper:
    """
    Public entry point of the extraction pipeline.

    Tries the static tier first and escalates to the rendered tier (which
    falls back to AI internally) when static data is missing or incomplete.
    No retries happen here; the job queue owns retry policy.
    """

    def __init__(
        self,
        static_fetcher: BaseFetcher,
        rendered_fetcher: BaseFetcher,
        options: PipelineOptions = PipelineOptions(),
        static_config: Optional[ExtractionConfig] = None,
        rendered_config: Optional[ExtractionConfig] = None,
    ):
        self.static_fetcher = static_fetcher
        self.rendered_fetcher = rendered_fetcher
        self.options = options
        self.static_config = static_config or ExtractionConfig.for_static()
        self.rendered_config = rendered_config or ExtractionConfig.for_rendered()

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        rules: SelectorRuleSet = DEFAULT_RULES,
        browser_manager: Optional[BrowserManager] = None,
    ) -> "ProductScraper":
        """Wire the full pipeline from settings."""
        config = config or default_settings
        options = PipelineOptions.from_settings(config)

        stability = StabilityConfig(
            max_wait_ms=config.playwright_max_wait_ms,
            quiet_window_ms=config.playwright_quiet_window_ms,
            check_interval_ms=config.playwright_check_interval_ms,
            html_delta_threshold=config.playwright_html_delta_threshold,
        )
        rendered = RenderedBrowserFetcher(
            browser_manager=browser_manager or BrowserManager(),
            ai_extractor=AIExtractor(config),
            rules=rules,
            stability=stability,
            force_ai=options.force_ai,
            debug=options.debug,
        )

        return cls(
            static_fetcher=StaticHTMLFetcher(rules=rules),
            rendered_fetcher=rendered,
            options=options,
            static_config=ExtractionConfig(config.static_timeout_ms, config.user_agent),
            rendered_config=ExtractionConfig(config.rendered_timeout_ms, config.user_agent),
        )

    async def scrape_product(
        self,
        url: str,
        config: Optional[ExtractionConfig] = None,
    ) -> ExtractionResult:
        """
        Extract title, price, currency and image for a product URL.

        Args:
            url: Product page URL
            config: Overrides timeout and user agent for every tier

        Returns:
            ExtractionResult from the tier that produced it

        Raises:
            ConfigurationError: AI provider is misconfigured
        """
        log = get_logger(__name__, url=url)

        if self.options.force_ai or self.options.skip_static:
            log.info("Skipping static tier (debug mode)")
            return await self.rendered_fetcher.fetch(url, config or self.rendered_config)

        static_result = await self.static_fetcher.fetch(url, config or self.static_config)
        if static_result.success and static_result.data is not None and static_result.data.is_complete:
            return static_result

        if static_result.success:
            log.info(f"Static tier data incomplete for {url}, escalating to rendered tier")
        else:
            log.info(f"Static tier failed for {url} ({static_result.error}), escalating to rendered tier")

        return await self.rendered_fetcher.fetch(url, config or self.rendered_config)

    async def aclose(self):
        """Release the HTTP client and shut down the shared browser."""
        await self.static_fetcher.close()
        await self.rendered_fetcher.close()

    async def __aenter__(self) -> "ProductScraper":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
