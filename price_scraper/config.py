"""Application configuration using Pydantic settings."""

from typing import List, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

SUPPORTED_AI_PROVIDERS = ("openai", "anthropic", "google")


class Settings(BaseSettings):
    """Application settings."""

    # Logging
    log_level: str = "INFO"
    log_dir: str = ""  # Empty disables JSON file logs
    debug_log: bool = False  # Verbose diagnostics (response headers, HTML previews)

    # ==========================================================================
    # Pipeline Debug Flags
    # ==========================================================================
    force_ai_extraction: bool = False  # Skip tier 1 and tier 2 selectors, go straight to AI
    skip_static_tier: bool = False  # Skip tier 1 only

    # ==========================================================================
    # Fetch Settings
    # ==========================================================================
    static_timeout_ms: int = 10000
    rendered_timeout_ms: int = 30000
    user_agent: str = DEFAULT_USER_AGENT

    # DOM stability detection (rendered tier)
    playwright_max_wait_ms: int = 15000
    playwright_quiet_window_ms: int = 1500
    playwright_check_interval_ms: int = 200
    playwright_html_delta_threshold: int = 200

    # ==========================================================================
    # AI & LLM Configuration
    # ==========================================================================
    ai_provider: str = "openai"  # "openai", "anthropic" or "google"

    # Model per provider, required for the selected provider
    openai_model: str = ""
    anthropic_model: str = ""
    google_model: str = ""

    # API keys (empty lets each SDK read its own environment variable)
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    google_api_key: str = ""

    ai_max_html_chars: int = 150000  # Max excerpt size sent to the model
    ai_min_content_length: int = 3000  # Below this, try a broader container
    llm_timeout_seconds: float = 60.0
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_ai_settings(self) -> Tuple[List[str], List[str]]:
        """
        Check the AI provider configuration.

        Returns:
            Tuple of (missing settings, warnings)
        """
        missing: List[str] = []
        warnings: List[str] = []

        provider = self.ai_provider.lower()
        if provider not in SUPPORTED_AI_PROVIDERS:
            missing.append(
                f"AI_PROVIDER={self.ai_provider!r} (expected one of: {', '.join(SUPPORTED_AI_PROVIDERS)})"
            )
            return missing, warnings

        model_name = getattr(self, f"{provider}_model")
        if not model_name:
            missing.append(f"{provider.upper()}_MODEL (required for AI_PROVIDER={provider})")

        if not getattr(self, f"{provider}_api_key"):
            warnings.append(
                f"{provider.upper()}_API_KEY not set in settings, "
                "relying on the provider SDK environment lookup"
            )

        if self.force_ai_extraction:
            warnings.append("FORCE_AI_EXTRACTION enabled - every scrape will call the model")

        return missing, warnings


settings = Settings()
