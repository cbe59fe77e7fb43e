"""OpenAI-compatible chat provider (OpenAI or a local LM Studio server)."""

import logging
from typing import Any

from openai import AsyncOpenAI

from agency_orchestrator.config import LLMConfig
from agency_orchestrator.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """Chat completions over the OpenAI API surface."""

    def __init__(self, config: LLMConfig, client: AsyncOpenAI | None = None) -> None:
        """Initialize the provider.

        Args:
            config: LLM configuration.
            client: Pre-built client (tests); built from `config` when omitted.

        Raises:
            ValueError: If the openai provider is selected without an API key.
        """
        if config.provider == "openai" and not config.api_key:
            raise ValueError("OpenAI API key is required")

        self.config = config
        self.model = config.model
        self.temperature = config.temperature
        self.max_tokens = config.max_tokens
        self.client = client or AsyncOpenAI(
            api_key=config.resolved_api_key,
            base_url=config.base_url,
        )

        logger.info(
            "LLM provider initialized",
            extra={"provider": config.provider, "model": self.model, "base_url": config.base_url},
        )

    async def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        temp = temperature if temperature is not None else self.temperature

        logger.debug(f"Generating chat completion with {len(messages)} messages")

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,  # type: ignore[arg-type]
            max_tokens=max_tokens or self.max_tokens,
            temperature=temp,
            **kwargs,
        )

        content = response.choices[0].message.content or ""
        logger.debug(f"Generated {len(content)} characters")

        return content

    async def close(self) -> None:
        await self.client.close()
