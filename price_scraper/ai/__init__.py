"""Language-model assisted extraction."""

from price_scraper.ai.extractor import AIExtractor
from price_scraper.ai.html_preparer import prepare_html_for_ai
from price_scraper.ai.llm_service import StructuredLLMClient, create_llm_client

__all__ = ["AIExtractor", "StructuredLLMClient", "create_llm_client", "prepare_html_for_ai"]
