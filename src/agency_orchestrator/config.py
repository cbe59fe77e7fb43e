"""Configuration for the agency orchestrator.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The learned-intent path is off by default so the router stays deterministic
until an LLM endpoint is explicitly configured.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LMSTUDIO_DEFAULT_BASE_URL = "http://localhost:1234/v1"


class LLMConfig(BaseSettings):
    """Configuration for the intent classification model.

    `lmstudio` talks to a local OpenAI-compatible server and needs no API key.
    """

    provider: Literal["openai", "lmstudio"] = Field(
        default="lmstudio",
        description="LLM provider to use",
    )
    api_key: str | None = Field(
        default=None,
        description="API key (required for the openai provider)",
    )
    model: str = Field(
        default="local-model",
        description="Model identifier passed to the chat completions API",
    )
    base_url: str | None = Field(
        default=None,
        description="Override for the API base URL",
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Sampling temperature; low values keep JSON output stable",
    )
    max_tokens: int = Field(
        default=1024,
        gt=0,
        description="Maximum tokens in a classification reply",
    )

    model_config = SettingsConfigDict(
        env_prefix="ORCHESTRATOR_LLM_",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _provider_defaults(self) -> LLMConfig:
        if self.provider == "lmstudio" and not self.base_url:
            self.base_url = LMSTUDIO_DEFAULT_BASE_URL
        return self

    @property
    def resolved_api_key(self) -> str:
        """API key to hand to the client; local servers accept any value."""

        if self.api_key:
            return self.api_key
        return "not-needed"


class OrchestratorSettings(BaseSettings):
    """Settings for the router and workflow engine.

    Environment variables:
    - LOG_LEVEL                              (optional)
    - LOG_FORMAT                             (optional, json | text)
    - ORCHESTRATOR_DEFAULT_DEPARTMENT        (optional)
    - ORCHESTRATOR_LEARNED_INTENT_ENABLED    (optional)
    - ORCHESTRATOR_STEP_TIMEOUT_SECONDS      (optional)
    - ORCHESTRATOR_LLM_*                     (see LLMConfig)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `OrchestratorSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        validation_alias="LOG_FORMAT",
        description="Structured JSON lines or plain text",
    )

    default_department: str | None = Field(
        default=None,
        validation_alias="ORCHESTRATOR_DEFAULT_DEPARTMENT",
        description="Department used when no keyword matches",
    )
    learned_intent_enabled: bool = Field(
        default=False,
        validation_alias="ORCHESTRATOR_LEARNED_INTENT_ENABLED",
        description="Consult the LLM classifier before keyword routing",
    )
    step_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        validation_alias="ORCHESTRATOR_STEP_TIMEOUT_SECONDS",
        description="Per-step timeout for workflow actions (None = no timeout)",
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="LLM configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _require_openai_key(self) -> OrchestratorSettings:
        if (
            self.learned_intent_enabled
            and self.llm.provider == "openai"
            and not (self.llm.api_key or "").strip()
        ):
            raise ValueError("ORCHESTRATOR_LLM_API_KEY is required for the openai provider")
        return self

    @property
    def normalized_default_department(self) -> str | None:
        if self.default_department is None or not self.default_department.strip():
            return None
        return self.default_department.strip().lower()
