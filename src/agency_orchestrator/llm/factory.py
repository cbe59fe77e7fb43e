"""Factory for LLM providers and the classifier built on them."""

import logging

from agency_orchestrator.config import LLMConfig
from agency_orchestrator.llm.classifier import LLMIntentClassifier
from agency_orchestrator.llm.openai_provider import OpenAIProvider
from agency_orchestrator.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

OPENAI_COMPATIBLE = ("openai", "lmstudio")


class LLMFactory:
    """Builds the learned-intent stack from configuration."""

    @staticmethod
    def create(config: LLMConfig) -> LLMProvider:
        """Create a chat provider.

        LM Studio speaks the OpenAI wire protocol, so both providers share one
        client class and differ only in base URL and key handling.

        Raises:
            ValueError: If the provider is not supported.
        """
        if config.provider not in OPENAI_COMPATIBLE:
            raise ValueError(f"Unsupported LLM provider: {config.provider}")

        logger.info("Creating LLM provider", extra={"provider": config.provider})
        return OpenAIProvider(config)

    @staticmethod
    def create_classifier(
        config: LLMConfig, provider: LLMProvider | None = None
    ) -> LLMIntentClassifier:
        """Wrap a provider (built from `config` when omitted) in an intent classifier."""
        return LLMIntentClassifier(
            provider or LLMFactory.create(config),
            temperature=config.temperature,
        )
