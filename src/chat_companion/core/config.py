"""Configuration management."""

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TRIGGER_PHRASES = ["promise", "will do", "i'll get", "i will", "remind me"]


class PipelineConfig(BaseModel):
    """Tuning for the memory, reminder and suggestion pipeline."""

    context_window_days: float = Field(default=1, gt=0, description="How far back memories stay eligible for reminders")  # noqa: E501
    max_suggestion_length: int = Field(default=100, gt=0, description="Character bound for reminders and suggested replies")  # noqa: E501
    summary_max_length: int = Field(default=97, gt=0, description="Characters kept before a memory summary is cut with '...'")  # noqa: E501
    trigger_phrases: list[str] = Field(default_factory=lambda: list(DEFAULT_TRIGGER_PHRASES))
    refinement_context_size: int = Field(default=5, ge=0, description="Prior messages shown to the model when refining")  # noqa: E501
    suggestion_count: int = Field(default=3, gt=0, description="Suggested replies kept per message")

    @field_validator("trigger_phrases")
    @classmethod
    def normalise_phrases(cls, phrases: list[str]) -> list[str]:
        """Lower-case and strip phrases, dropping blanks."""
        return [p.strip().lower() for p in phrases if p and p.strip()]


class OracleConfig(BaseModel):
    """Resilience settings for generative model calls."""

    timeout_seconds: float = Field(default=20.0, gt=0)
    failure_threshold: int = Field(default=5, gt=0)
    recovery_timeout: float = Field(default=30.0, gt=0)


class Settings(BaseSettings):
    # API Keys
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"

    # Neo4j
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"

    # Auth
    jwt_secret_key: str = Field(default="change-me", description="Secret used to verify caller bearer tokens")  # noqa: E501
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    webhook_secret: str | None = Field(default=None, description="Shared secret required on event webhooks when set")  # noqa: E501

    # App config
    debug: bool = True
    logfire_token: str | None = None
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_nested_delimiter="__",  # Allows PIPELINE__CONTEXT_WINDOW_DAYS=2
    )


settings = Settings()
