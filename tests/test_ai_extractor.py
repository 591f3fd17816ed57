"""Tests for AI extraction with a fake structured-output client."""

import pytest

from price_scraper.ai.extractor import AIExtractor
from price_scraper.ai.llm_service import (
    AnthropicStructuredClient,
    GoogleStructuredClient,
    OpenAIStructuredClient,
    StructuredLLMClient,
    create_llm_client,
    resolve_model_name,
)
from price_scraper.ai.prompts import ProductExtraction, build_extraction_prompt, product_json_schema
from price_scraper.config import Settings
from price_scraper.errors import ConfigurationError
from price_scraper.models import ExtractionMethod


class FakeLLMClient(StructuredLLMClient):
    provider = "fake"

    def __init__(self, extraction=None, error=None):
        super().__init__(model="fake-model")
        self.extraction = extraction
        self.error = error
        self.prompts = []

    async def _generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.extraction


def make_settings(**overrides) -> Settings:
    values = {"ai_provider": "openai", "openai_model": "gpt-test"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.mark.asyncio
async def test_extract_converts_price_and_resolves_image():
    """Test conversion of model output to product data."""
    client = FakeLLMClient(ProductExtraction(
        title="  Widget ",
        price=19.99,
        currency="usd",
        imageUrl="/img/w.jpg",
    ))
    extractor = AIExtractor(make_settings(), client=client)

    result = await extractor.extract("https://shop.example/p/1", "<body><h1>Widget</h1></body>")

    assert result.success
    assert result.method == ExtractionMethod.AI
    assert result.data.title == "Widget"
    assert result.data.price == 1999
    assert result.data.currency == "USD"
    assert result.data.image_url == "https://shop.example/img/w.jpg"
    assert "https://shop.example/p/1" in client.prompts[0]


@pytest.mark.asyncio
async def test_extract_title_only_is_success():
    """Test that a title without a price still succeeds."""
    client = FakeLLMClient(ProductExtraction(title="Widget"))
    result = await AIExtractor(make_settings(), client=client).extract("https://shop.example/p", "<p>x</p>")

    assert result.success
    assert result.data.price is None
    assert result.data.currency is None


@pytest.mark.asyncio
async def test_extract_drops_invalid_currency_and_negative_price():
    """Test that unusable values become null instead of failing."""
    client = FakeLLMClient(ProductExtraction(title="Widget", price=-5, currency="dollars"))
    result = await AIExtractor(make_settings(), client=client).extract("https://shop.example/p", "<p>x</p>")

    assert result.success
    assert result.data.price is None
    assert result.data.currency is None


@pytest.mark.asyncio
async def test_extract_without_title_or_price_fails():
    """Test the failure when the model finds nothing useful."""
    client = FakeLLMClient(ProductExtraction(imageUrl="https://cdn.example/a.jpg"))
    result = await AIExtractor(make_settings(), client=client).extract("https://shop.example/p", "<p>x</p>")

    assert not result.success
    assert result.method == ExtractionMethod.AI
    assert result.error == "AI extraction failed: no title or price found in HTML"
    assert result.error_type == "AIExtractionError"


@pytest.mark.asyncio
async def test_client_error_becomes_failed_result():
    """Test that provider errors are reported, not raised."""
    client = FakeLLMClient(error=RuntimeError("rate limited"))
    result = await AIExtractor(make_settings(), client=client).extract("https://shop.example/p", "<p>x</p>")

    assert not result.success
    assert result.error == "AI extraction error: rate limited"
    assert result.error_type == "AIExtractionError"


@pytest.mark.asyncio
async def test_prompt_respects_html_budget():
    """Test that the excerpt embedded in the prompt is bounded."""
    client = FakeLLMClient(ProductExtraction(title="Widget"))
    config = make_settings(ai_max_html_chars=500)
    html = "<body>" + "<p>filler text</p>" * 5000 + "</body>"

    await AIExtractor(config, client=client).extract("https://shop.example/p", html)

    overhead = len(build_extraction_prompt("https://shop.example/p", ""))
    assert len(client.prompts[0]) - overhead <= 500


@pytest.mark.asyncio
async def test_missing_model_raises_configuration_error():
    """Test that a provider without a model name is a configuration error."""
    extractor = AIExtractor(make_settings(openai_model=""))

    with pytest.raises(ConfigurationError) as exc_info:
        await extractor.extract("https://shop.example/p", "<p>x</p>")

    assert exc_info.value.setting == "openai_model"
    assert "OPENAI_MODEL" in str(exc_info.value)


def test_unknown_provider_raises_configuration_error():
    """Test that unsupported providers are rejected."""
    with pytest.raises(ConfigurationError):
        resolve_model_name(make_settings(ai_provider="cohere"))


@pytest.mark.parametrize(
    "provider,setting,client_cls",
    [
        ("openai", "openai_model", OpenAIStructuredClient),
        ("anthropic", "anthropic_model", AnthropicStructuredClient),
        ("google", "google_model", GoogleStructuredClient),
    ],
)
def test_create_llm_client_per_provider(provider, setting, client_cls):
    """Test client selection and model resolution per provider."""
    config = make_settings(ai_provider=provider, **{setting: "model-x"})
    client = create_llm_client(config)

    assert isinstance(client, client_cls)
    assert client.model == "model-x"


def test_json_schema_matches_response_model():
    """Test that the raw schema lists every response field."""
    schema = product_json_schema()
    assert set(schema["required"]) == set(ProductExtraction.model_fields)
    assert schema["additionalProperties"] is False


class FakeAsyncSession:
    def __init__(self):
        self.closed = False

    async def aclose(self):
        self.closed = True


class FakeGenaiClient:
    def __init__(self):
        self.aio = FakeAsyncSession()


@pytest.mark.asyncio
async def test_google_client_close_releases_async_session():
    """Test that closing the Gemini client closes its async session."""
    client = GoogleStructuredClient(model="gemini-test")
    sdk_client = FakeGenaiClient()
    client._client = sdk_client

    await client.close()

    assert sdk_client.aio.closed
    assert client._client is None


@pytest.mark.asyncio
async def test_close_without_sdk_client_is_noop():
    """Test closing clients that were never used."""
    for client_cls in (OpenAIStructuredClient, AnthropicStructuredClient, GoogleStructuredClient):
        client = client_cls(model="model-x")
        await client.close()
        assert client._client is None
