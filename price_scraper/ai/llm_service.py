"""Structured-output LLM clients for the supported providers.

Each client takes a prompt and returns a validated ``ProductExtraction``.
Provider and model come from settings; a selected provider without a model
name is a ConfigurationError raised by ``create_llm_client``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from anthropic import AsyncAnthropic
from google import genai
from google.genai import types as genai_types
from openai import AsyncOpenAI

from price_scraper.ai.prompts import SYSTEM_PROMPT, ProductExtraction, product_json_schema
from price_scraper.config import SUPPORTED_AI_PROVIDERS, Settings
from price_scraper.errors import AIExtractionError, ConfigurationError

logger = logging.getLogger(__name__)

TOOL_NAME = "record_product"


class StructuredLLMClient(ABC):
    """Base class for provider clients returning ``ProductExtraction``."""

    provider: str = ""

    def __init__(
        self,
        model: str,
        api_key: str = "",
        timeout_seconds: float = 60.0,
        max_tokens: int = 1024,
        temperature: float = 0.0,
    ):
        self.model = model
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client: Optional[Any] = None

    async def generate(self, prompt: str) -> ProductExtraction:
        """
        Call the model with a hard timeout.

        Raises:
            asyncio.TimeoutError, provider SDK errors, pydantic ValidationError
            or AIExtractionError; the caller converts them into a failed result
        """
        logger.debug(f"Calling {self.provider} model {self.model} ({len(prompt)} prompt chars)")
        return await asyncio.wait_for(self._generate(prompt), timeout=self.timeout_seconds)

    @abstractmethod
    async def _generate(self, prompt: str) -> ProductExtraction:
        """Provider-specific structured call."""

    async def close(self):
        """Close the underlying SDK client if it has one."""
        self._client = None


class OpenAIStructuredClient(StructuredLLMClient):
    """OpenAI chat completions with a strict JSON schema response format."""

    provider = "openai"

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key or None)
        return self._client

    async def _generate(self, prompt: str) -> ProductExtraction:
        response = await self._get_client().chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": "product_data",
                    "schema": product_json_schema(),
                    "strict": True,
                },
            },
        )

        content = response.choices[0].message.content
        if not content:
            raise AIExtractionError(None, "OpenAI returned an empty response")
        return ProductExtraction.model_validate_json(content)

    async def close(self):
        if self._client is not None:
            await self._client.close()
        self._client = None


class AnthropicStructuredClient(StructuredLLMClient):
    """Anthropic messages API with a forced tool call carrying the schema."""

    provider = "anthropic"

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key or None)
        return self._client

    async def _generate(self, prompt: str) -> ProductExtraction:
        response = await self._get_client().messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=SYSTEM_PROMPT,
            tools=[{
                "name": TOOL_NAME,
                "description": "Record the extracted product data.",
                "input_schema": product_json_schema(),
            }],
            tool_choice={"type": "tool", "name": TOOL_NAME},
            messages=[{"role": "user", "content": prompt}],
        )

        for block in response.content:
            if getattr(block, "type", None) == "tool_use":
                return ProductExtraction.model_validate(block.input)

        raise AIExtractionError(None, "Anthropic response contained no tool call")

    async def close(self):
        if self._client is not None:
            await self._client.close()
        self._client = None


class GoogleStructuredClient(StructuredLLMClient):
    """Gemini via google-genai with a response schema."""

    provider = "google"

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key or None)
        return self._client

    async def _generate(self, prompt: str) -> ProductExtraction:
        response = await self._get_client().aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=SYSTEM_PROMPT,
                temperature=self.temperature,
                max_output_tokens=self.max_tokens,
                response_mime_type="application/json",
                response_schema=ProductExtraction,
            ),
        )

        if isinstance(response.parsed, ProductExtraction):
            return response.parsed
        if not response.text:
            raise AIExtractionError(None, "Gemini returned an empty response")
        return ProductExtraction.model_validate_json(response.text)

    async def close(self):
        if self._client is not None:
            await self._client.aio.aclose()
        self._client = None


_CLIENTS = {
    "openai": OpenAIStructuredClient,
    "anthropic": AnthropicStructuredClient,
    "google": GoogleStructuredClient,
}


def resolve_model_name(config: Settings) -> str:
    """
    Return the model configured for the selected provider.

    Raises:
        ConfigurationError: Unknown provider or no model name for it
    """
    provider = config.ai_provider.lower()
    if provider not in SUPPORTED_AI_PROVIDERS:
        raise ConfigurationError(
            "ai_provider",
            f"Unknown AI_PROVIDER {config.ai_provider!r}; expected one of: "
            f"{', '.join(SUPPORTED_AI_PROVIDERS)}",
        )

    setting = f"{provider}_model"
    model_name = getattr(config, setting)
    if not model_name:
        raise ConfigurationError(
            setting,
            f"{setting.upper()} environment variable is required for AI extraction",
        )
    return model_name


def create_llm_client(config: Settings) -> StructuredLLMClient:
    """Build the structured-output client for the configured provider."""
    model_name = resolve_model_name(config)
    provider = config.ai_provider.lower()

    client_cls = _CLIENTS[provider]
    logger.info(f"Using AI provider: {provider}, model: {model_name}")
    return client_cls(
        model=model_name,
        api_key=getattr(config, f"{provider}_api_key"),
        timeout_seconds=config.llm_timeout_seconds,
        max_tokens=config.llm_max_tokens,
        temperature=config.llm_temperature,
    )
