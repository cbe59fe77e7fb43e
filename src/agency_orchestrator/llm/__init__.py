"""LLM package initialization."""

from agency_orchestrator.llm.classifier import (
    ClassificationError,
    ClassificationResult,
    IntentClassifier,
    LLMIntentClassifier,
)
from agency_orchestrator.llm.factory import LLMFactory
from agency_orchestrator.llm.provider import LLMProvider

__all__ = [
    "ClassificationError",
    "ClassificationResult",
    "IntentClassifier",
    "LLMFactory",
    "LLMIntentClassifier",
    "LLMProvider",
]
