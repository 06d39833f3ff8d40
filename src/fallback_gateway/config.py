"""
Configuration settings for the LLM Fallback Gateway.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.

Only the HTTP boundary reads these values. The orchestration engine receives
ready-made provider descriptors and a retry policy instead.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

from fallback_gateway.models.enums import FallbackPolicy


SANSKRIT_TRANSLATION_INSTRUCTION = (
    "You are an expert Sanskrit language translator. Translate the user's input "
    "(which may be English or Hinglish) into pure, correct Sanskrit using the "
    "Devanagari script. Do not include any explanation, commentary, or extra text, "
    "only the translated Sanskrit phrase."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "LLM Fallback Gateway"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # === Groq (primary, OpenAI-compatible) ===
    GROQ_API_KEY: Optional[str] = None
    GROQ_MODEL: str = "meta-llama/llama-4-maverick-17b-128e-instruct"
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"

    # === Cerebras (fallback, OpenAI-compatible) ===
    CEREBRAS_API_KEY: Optional[str] = None
    CEREBRAS_MODEL: str = "qwen-3-235b-a22b-instruct-2507"
    CEREBRAS_BASE_URL: str = "https://api.cerebras.ai/v1"

    # === Gemini (generateContent family, key in query string) ===
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"

    # === Fallback chain ===
    PROVIDER_ORDER: list[str] = ["groq", "cerebras"]  # Priority order, first is primary
    FALLBACK_POLICY: FallbackPolicy = FallbackPolicy.SEQUENTIAL

    # === Retry & Timeout ===
    REQUEST_TIMEOUT_MS: int = 8000  # Per attempt
    MAX_RETRIES: int = 2  # Retries after the first attempt
    RETRY_BACKOFF_BASE_MS: int = 1000
    RETRY_BACKOFF_CAP_MS: int = 5000

    # === Generation defaults ===
    DEFAULT_TEMPERATURE: float = 0.7
    DEFAULT_MAX_TOKENS: int = 1000
    LEGACY_SYSTEM_INSTRUCTION: str = SANSKRIT_TRANSLATION_INSTRUCTION

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
