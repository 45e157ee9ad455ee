"""Configuration module for the occurrence text assistant.

This module provides Pydantic models for configuration management,
loading settings from both .env and config.yml files.
"""

import os
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "Você é um especialista em redação técnica para relatórios de obra e "
    "construção civil. Analise textos e forneça sugestões específicas para "
    "melhorar clareza, precisão técnica e profissionalismo."
)


class LLMProviderDetails(BaseSettings):
    """Configuration for a specific LLM provider."""

    api_base: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None

    model_config = SettingsConfigDict(extra="allow")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LLMProviderDetails":
        """Create a LLMProviderDetails instance from a dictionary."""
        return cls(**data)


def _default_providers() -> dict[str, LLMProviderDetails]:
    return {
        "openai": LLMProviderDetails(api_base="https://api.openai.com/v1"),
        "openrouter": LLMProviderDetails(api_base="https://openrouter.ai/api/v1"),
        "anthropic": LLMProviderDetails(api_base="https://api.anthropic.com/v1"),
    }


class Settings(BaseSettings):
    """Main settings class for the application."""

    # Logging
    log_level: str = "INFO"

    # LLM settings
    default_provider: str = "openai"
    analysis_model: str = "gpt-4.1-mini"
    temperature: float = 0.3
    max_tokens_response: int = 300
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    llm_providers: dict[str, LLMProviderDetails] = Field(
        default_factory=_default_providers
    )
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    openrouter_api_key: str | None = None

    # LLM Retry Settings (Tenacity). Off by default: one attempt per analysis.
    llm_retry_enabled: bool = Field(
        False,
        description="Enable or disable retries for LLM calls.",
    )
    llm_retry_attempts: int = Field(
        3,
        gt=0,
        description="Maximum number of retry attempts for LLM calls.",
    )
    llm_retry_wait_min_seconds: float = Field(
        1.0,
        gt=0,
        description="Minimum wait time in seconds for exponential backoff.",
    )
    llm_retry_wait_max_seconds: float = Field(
        10.0,
        gt=0,
        description="Maximum wait time in seconds for exponential backoff.",
    )
    llm_request_timeout_seconds: float | None = Field(
        None,
        description="Total timeout for LLM API requests in seconds. None disables it.",
    )

    # Analysis settings
    remote_min_text_length: int = Field(
        10,
        ge=0,
        description="Texts of this length or shorter are never sent to the LLM.",
    )
    max_suggestions: int = Field(
        3,
        gt=0,
        le=3,
        description="Capacity of the consolidated suggestion list.",
    )

    # For environment file
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        validate_assignment=True,
    )

    @field_validator("default_provider")
    def normalize_provider(cls, v: str) -> str:  # pylint: disable=E0213
        """Provider names are matched case-insensitively."""
        return v.strip().lower()

    @field_validator("log_level")
    def normalize_log_level(cls, v: str) -> str:  # pylint: disable=E0213
        return v.strip().upper()


def load_settings(yaml_config_path: str = "config.yml") -> Settings:
    """Load settings from environment variables and config.yml.

    Environment variables win over YAML values; YAML wins over defaults.
    YAML values are validated like any other source.

    Returns:
        Settings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If a YAML value violates a field constraint.

    """
    yaml_data: dict[str, Any] = {}

    if os.path.exists(yaml_config_path):
        with open(yaml_config_path, encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

    settings = Settings()

    for key, value in yaml_data.items():
        # Keys set through the environment are left untouched
        if key.upper() in os.environ:
            continue
        if key == "llm_providers" and isinstance(value, dict):
            providers = dict(settings.llm_providers)
            for provider_name, provider_config in value.items():
                if isinstance(provider_config, dict):
                    providers[provider_name.lower()] = LLMProviderDetails.from_dict(
                        provider_config
                    )
                else:
                    providers[provider_name.lower()] = provider_config
            settings.llm_providers = providers
        elif key in Settings.model_fields:
            setattr(settings, key, value)

    return settings


def get_settings() -> Settings:
    """Get settings instance.

    In production code, pass the Settings object explicitly to the classes that
    need it rather than calling this function from inside those components.
    """
    return load_settings()
