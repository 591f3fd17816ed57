"""Tests for settings validation."""

from price_scraper.config import Settings


def make_settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_defaults():
    """Test default timeouts and stability tuning."""
    config = make_settings()
    assert config.static_timeout_ms == 10000
    assert config.rendered_timeout_ms == 30000
    assert config.playwright_max_wait_ms == 15000
    assert config.playwright_quiet_window_ms == 1500
    assert config.ai_max_html_chars == 150000


def test_validate_ai_settings_complete():
    """Test that a configured provider reports nothing missing."""
    config = make_settings(ai_provider="anthropic", anthropic_model="model-x", anthropic_api_key="key")
    missing, warnings = config.validate_ai_settings()
    assert missing == []
    assert warnings == []


def test_validate_ai_settings_missing_model():
    """Test that the selected provider's model is required."""
    config = make_settings(ai_provider="google", google_model="", google_api_key="key")
    missing, _ = config.validate_ai_settings()
    assert len(missing) == 1
    assert "GOOGLE_MODEL" in missing[0]


def test_validate_ai_settings_unknown_provider():
    """Test that an unknown provider is reported."""
    missing, _ = make_settings(ai_provider="cohere").validate_ai_settings()
    assert "AI_PROVIDER" in missing[0]


def test_validate_ai_settings_warns_without_key_and_on_force_ai():
    """Test warnings for SDK key lookup and forced AI mode."""
    config = make_settings(openai_model="gpt-test", openai_api_key="", force_ai_extraction=True)
    _, warnings = config.validate_ai_settings()
    assert any("OPENAI_API_KEY" in w for w in warnings)
    assert any("FORCE_AI_EXTRACTION" in w for w in warnings)
