from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="flashdeck", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class GenerationSettings(BaseSettings):
    """Retry, timeout and acceptance knobs for flashcard generation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    max_attempts: int = Field(default=3, alias="GENERATION_MAX_ATTEMPTS")
    timeout_ms: int = Field(default=30000, alias="GENERATION_TIMEOUT_MS")
    base_delay_ms: int = Field(default=1000, alias="GENERATION_BASE_DELAY_MS")
    min_accept_ratio: float = Field(default=0.5, alias="GENERATION_MIN_ACCEPT_RATIO")
    enable_fallback: bool = Field(default=True, alias="GENERATION_ENABLE_FALLBACK")
    temperature: float = Field(default=0.7, alias="GENERATION_TEMPERATURE")

    @computed_field
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @computed_field
    def base_delay_seconds(self) -> float:
        return self.base_delay_ms / 1000.0


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    generation: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings()
    )

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    anthropic_api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    openrouter_api_key: Optional[str] = Field(default=None, alias="OPENROUTER_API_KEY")

    # Model provider selection: "google", "anthropic" or "openrouter"
    model_provider: str = Field(default="google", alias="MODEL_PROVIDER")
    google_model: str = Field(default="gemini-2.0-flash", alias="GOOGLE_MODEL")
    anthropic_model: str = Field(
        default="claude-sonnet-4-0", alias="ANTHROPIC_MODEL"
    )
    openrouter_model: str = Field(
        default="x-ai/grok-code-fast-1", alias="OPENROUTER_MODEL"
    )


settings = Settings()
