"""
Configuration settings for the Content Acquisition Layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Content Acquisition Layer"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # === Circuit Breaker ===
    FAILURE_THRESHOLD: int = 3  # Failures before a provider circuit opens
    RESET_TIMEOUT_SECONDS: float = 300.0  # Open -> half-open cooldown

    # === Transcript Providers ===
    TRANSCRIPT_PROVIDERS: list[str] = ["youtubetotranscript"]  # Priority order
    REQUEST_TIMEOUT_SECONDS: float = 30.0  # Per attempt, independent of backoff
    MIN_TRANSCRIPT_LENGTH: int = 10  # chars

    # === Response Cache ===
    CACHE_TTL_SECONDS: float = 3600.0

    # === Retry ===
    RETRY_MAX_ATTEMPTS: int = 5  # Total attempts, including the first
    RETRY_INITIAL_DELAY: float = 1.0  # seconds
    RETRY_BACKOFF_MULTIPLIER: float = 2.0
    RETRY_JITTER_FRACTION: float = 0.25  # +/-25%

    # === Structured Output Repair ===
    MAX_REPAIR_ATTEMPTS: int = 3  # Total validations, including the first
    REPAIR_PROMPT_TRUNCATION_LIMIT: int = 12000  # chars
    PROMPT_TEMPLATES_DIR: str | None = None  # Defaults to the bundled llm/prompts

    # === Ollama Configuration ===
    OLLAMA_BASE_URL: str = "http://ollama:11434"
    OLLAMA_MODEL: str = "qwen2.5:7b"
    OLLAMA_TIMEOUT: int = 60  # seconds

    # === LLM Generation Parameters ===
    LLM_TEMPERATURE: float = 0.2
    LLM_MAX_TOKENS: int = 4096

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
