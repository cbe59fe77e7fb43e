"""Learned intent classification.

The router consumes classification only through the `IntentClassifier`
protocol. `LLMIntentClassifier` is the production implementation: it prompts a
chat model with the registered agents' summaries and validates the JSON reply.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from typing import Any, Protocol

from pydantic import BaseModel, Field, ValidationError

from agency_orchestrator.agents.types import AgentSummary
from agency_orchestrator.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class ClassificationError(RuntimeError):
    """The classifier could not produce a usable result."""


class ClassificationResult(BaseModel):
    """Validated reply from the classification model."""

    department: str
    confidence: float = Field(ge=0.0, le=1.0)
    action: str
    reasoning: str
    parameters: dict[str, Any] | None = None


class IntentClassifier(Protocol):
    async def classify(
        self, message: str, summaries: Sequence[AgentSummary]
    ) -> ClassificationResult: ...


ROUTING_PROMPT = """\
You are an intelligent router for a multi-agent system. Your task is to analyze the user's message
and determine the most appropriate department and action to handle the request.

Available Agents and their responsibilities:
{agents}

User message: "{message}"

Task:
1. Identify the 'department'.
2. Identify the 'action' ONLY from the "Supported Actions" list for that department.
3. Extract any 'parameters' (e.g., employee name, project name, item quantity, dates, IDs).
   - For employee searches, put the name in "name".
   - For inventory, put the item name in "item" and quantity in "quantity".
4. Assign a 'confidence' score (0.0 to 1.0).
5. Provide 'reasoning' for your choice.

Respond in valid JSON:
{{
  "department": "...",
  "action": "...",
  "parameters": {{ ... }},
  "confidence": 0.0,
  "reasoning": "..."
}}
"""


def build_routing_prompt(message: str, summaries: Sequence[AgentSummary]) -> str:
    agents = "\n".join(
        f"- {s.department.upper()}: {s.description}\n"
        f"  Supported Actions: {', '.join(s.supported_actions)}"
        for s in summaries
    )
    return ROUTING_PROMPT.format(agents=agents, message=message)


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def extract_json_object(raw: str) -> dict[str, Any]:
    """Pull the routing JSON object out of a free-form model reply.

    Models wrap JSON in markdown fences, prepend reasoning, or emit stray `{}`
    blocks. Tried in order: a fenced block, the widest brace-delimited span
    mentioning "department", then first-to-last brace.

    Raises:
        ClassificationError: If no JSON object can be parsed.
    """
    fenced = _FENCED_BLOCK.search(raw)
    if fenced:
        parsed = _loads_object(fenced.group(1).strip())
        if parsed is not None:
            return parsed

    starts = [m.start() for m in re.finditer(r"\{", raw)]
    ends = [m.start() for m in re.finditer(r"\}", raw)]
    for start in starts:
        for end in reversed(ends):
            if end <= start:
                break
            candidate = raw[start : end + 1]
            if "department" not in candidate:
                continue
            parsed = _loads_object(candidate)
            if parsed is not None:
                return parsed

    first, last = raw.find("{"), raw.rfind("}")
    if first != -1 and last > first:
        parsed = _loads_object(raw[first : last + 1])
        if parsed is not None:
            return parsed

    raise ClassificationError("No valid JSON object found in the response.")


class LLMIntentClassifier:
    """Classify messages with a chat model."""

    def __init__(self, provider: LLMProvider, *, temperature: float | None = None) -> None:
        self._provider = provider
        self._temperature = temperature

    async def classify(
        self, message: str, summaries: Sequence[AgentSummary]
    ) -> ClassificationResult:
        if not summaries:
            raise ClassificationError("No agents are registered.")

        prompt = build_routing_prompt(message, summaries)
        try:
            raw = await self._provider.generate(prompt, temperature=self._temperature)
        except Exception as e:
            raise ClassificationError(f"Classification service unavailable: {e}") from e

        logger.debug("Parsing classification reply", extra={"chars": len(raw)})
        payload = extract_json_object(raw)
        try:
            result = ClassificationResult.model_validate(payload)
        except ValidationError as e:
            raise ClassificationError(f"Malformed classification reply: {e}") from e

        logger.info(
            "Classification result",
            extra={
                "department": result.department,
                "action": result.action,
                "confidence": result.confidence,
            },
        )
        return result
