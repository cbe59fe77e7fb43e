"""Unit tests for intent resolution and routing."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from agency_orchestrator.agents.registry import AgentRegistry
from agency_orchestrator.agents.router import (
    AgentRouter,
    IntentResolver,
    description_terms,
    keyword_confidence,
)
from agency_orchestrator.agents.types import AgentResponse, AgentSummary, DetectionMethod
from agency_orchestrator.llm.classifier import ClassificationError, ClassificationResult


class StubClassifier:
    def __init__(self, result: ClassificationResult | Exception) -> None:
        self._result = result
        self.calls: list[tuple[str, list[str]]] = []

    async def classify(
        self, message: str, summaries: Sequence[AgentSummary]
    ) -> ClassificationResult:
        self.calls.append((message, [s.department for s in summaries]))
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


def _learned(department: str, **overrides: Any) -> ClassificationResult:
    fields: dict[str, Any] = {
        "department": department,
        "confidence": 0.9,
        "action": "CHECK_STOCK",
        "reasoning": "stock question",
        "parameters": {"item": "bolts"},
    }
    fields.update(overrides)
    return ClassificationResult(**fields)


def test_description_terms_filters_short_words_and_duplicates() -> None:
    assert description_terms("Handles HR and leave, leave, pay") == ["handles", "leave"]


def test_keyword_confidence_is_capped() -> None:
    assert keyword_confidence(0) == pytest.approx(0.1)
    assert keyword_confidence(6) == pytest.approx(0.4)
    assert keyword_confidence(40) == 1.0


async def test_keywords_pick_manufacturing_for_inventory_message(
    agent_registry: AgentRegistry,
) -> None:
    resolver = IntentResolver(agent_registry)

    detection = await resolver.resolve("We need to check inventory levels for production")

    assert detection.department == "manufacturing"
    assert detection.method is DetectionMethod.KEYWORD
    assert detection.confidence == pytest.approx(4 / 15)
    assert "inventory" in detection.reason


async def test_department_name_outweighs_description_terms(agent_registry: AgentRegistry) -> None:
    resolver = IntentResolver(agent_registry)

    detection = await resolver.resolve("Ask HR about the vacation policy")

    assert detection.department == "hr"
    assert detection.confidence == pytest.approx(12 / 15)


async def test_keyword_resolution_is_deterministic(agent_registry: AgentRegistry) -> None:
    resolver = IntentResolver(agent_registry)
    message = "Estimate the material cost for the new warehouse"

    first = await resolver.resolve(message)
    second = await resolver.resolve(message)

    assert first == second
    assert first.department == "construction"


def test_ties_go_to_earliest_registered(make_agent: Any) -> None:
    registry = AgentRegistry()
    registry.register("alpha", make_agent("A", "shared words"))
    registry.register("beta", make_agent("B", "shared words"))

    detection = IntentResolver(registry).resolve_by_keywords("some shared thing")

    assert detection.department == "alpha"


async def test_no_signal_falls_back_to_first_registered(agent_registry: AgentRegistry) -> None:
    detection = await IntentResolver(agent_registry).resolve("What's the weather like?")

    assert detection.department == "construction"
    assert detection.confidence == pytest.approx(0.1)
    assert detection.method is DetectionMethod.KEYWORD


async def test_no_signal_uses_configured_default(agent_registry: AgentRegistry) -> None:
    resolver = IntentResolver(agent_registry, default_department="HR")

    detection = await resolver.resolve("What's the weather like?")

    assert detection.department == "hr"


async def test_empty_registry_resolves_to_unknown() -> None:
    detection = await IntentResolver(AgentRegistry()).resolve("anything")

    assert detection.department == "unknown"
    assert detection.confidence == pytest.approx(0.1)


async def test_context_department_overrides_everything(agent_registry: AgentRegistry) -> None:
    classifier = StubClassifier(_learned("manufacturing"))
    resolver = IntentResolver(agent_registry, classifier)

    detection = await resolver.resolve(
        "We need to check inventory levels for production", {"department": "HR"}
    )

    assert detection.department == "hr"
    assert detection.confidence == 1.0
    assert detection.method is DetectionMethod.CONTEXT
    assert classifier.calls == []


async def test_unregistered_context_department_is_ignored(agent_registry: AgentRegistry) -> None:
    resolver = IntentResolver(agent_registry)

    detection = await resolver.resolve(
        "We need to check inventory levels for production", {"department": "finance"}
    )

    assert detection.department == "manufacturing"
    assert detection.method is DetectionMethod.KEYWORD


async def test_learned_detection_carries_action_and_parameters(
    agent_registry: AgentRegistry,
) -> None:
    classifier = StubClassifier(_learned("Manufacturing"))
    resolver = IntentResolver(agent_registry, classifier)

    detection = await resolver.resolve("how many bolts are left?")

    assert detection.department == "manufacturing"
    assert detection.method is DetectionMethod.LEARNED
    assert detection.action == "CHECK_STOCK"
    assert detection.parameters == {"item": "bolts"}
    assert classifier.calls == [
        ("how many bolts are left?", ["construction", "manufacturing", "hr"])
    ]


async def test_learned_path_can_be_disabled(agent_registry: AgentRegistry) -> None:
    classifier = StubClassifier(_learned("hr"))
    resolver = IntentResolver(agent_registry, classifier, learned_enabled=False)

    detection = await resolver.resolve("We need to check inventory levels for production")

    assert resolver.learned_active is False
    assert detection.method is DetectionMethod.KEYWORD
    assert classifier.calls == []


async def test_classifier_failure_falls_back_to_keywords(agent_registry: AgentRegistry) -> None:
    resolver = IntentResolver(agent_registry, StubClassifier(ClassificationError("offline")))

    detection = await resolver.resolve("We need to check inventory levels for production")

    assert detection.department == "manufacturing"
    assert detection.method is DetectionMethod.KEYWORD


async def test_unregistered_learned_department_is_discarded(
    agent_registry: AgentRegistry,
) -> None:
    resolver = IntentResolver(agent_registry, StubClassifier(_learned("finance")))

    detection = await resolver.resolve("Ask HR about the vacation policy")

    assert detection.department == "hr"
    assert detection.method is DetectionMethod.KEYWORD


async def test_route_forwards_merged_context(
    agent_registry: AgentRegistry, manufacturing: Any
) -> None:
    resolver = IntentResolver(agent_registry, StubClassifier(_learned("manufacturing")))
    router = AgentRouter(agent_registry, resolver)

    response = await router.route("how many bolts?", "s-1", {"item": "nuts", "site": "plant-2"})

    assert response.department == "manufacturing"
    assert response.detection is not None
    assert response.detection.method is DetectionMethod.LEARNED
    message, context, detection = manufacturing.received[0]
    assert context == {"item": "bolts", "site": "plant-2"}
    assert detection is response.detection


async def test_route_reports_missing_agent() -> None:
    registry = AgentRegistry()
    router = AgentRouter(registry, IntentResolver(registry))

    response = await router.route("hello", "s-2")

    assert response.department == "unknown"
    assert "No agent found for department: unknown" in response.message
    assert response.detection is not None
    assert response.detection.confidence == 0.0


async def test_route_never_raises(make_agent: Any) -> None:
    class ExplodingAgent(make_agent):  # type: ignore[misc, valid-type]
        async def process_message(
            self,
            message: str,
            session_id: str,
            context: Mapping[str, Any] | None = None,
            detection: Any = None,
        ) -> AgentResponse:
            raise RuntimeError("agent crashed")

    registry = AgentRegistry()
    registry.register("hr", ExplodingAgent("HR", "people"))
    router = AgentRouter(registry, IntentResolver(registry))

    response = await router.route("hr question", "s-3")

    assert response.department == "unknown"
    assert "agent crashed" in response.message
    assert response.session_id == "s-3"


def test_router_stats(agent_registry: AgentRegistry) -> None:
    router = AgentRouter(agent_registry, IntentResolver(agent_registry))

    stats = router.stats().to_json()

    assert stats == {
        "registered_departments": ["construction", "manufacturing", "hr"],
        "total_agents": 3,
        "learned_intent": False,
    }


async def test_department_key_inside_a_word_is_not_a_name_match(
    agent_registry: AgentRegistry,
) -> None:
    resolver = IntentResolver(agent_registry)

    detection = await resolver.resolve("Schedule maintenance on the three production lines")

    assert detection.department == "manufacturing"
    assert detection.confidence == pytest.approx(4 / 15)
    assert "department name" not in detection.reason


async def test_low_inventory_reorder_with_only_manufacturing(manufacturing: Any) -> None:
    registry = AgentRegistry()
    registry.register("manufacturing", manufacturing)

    detection = await IntentResolver(registry).resolve("inventory is low, reorder bolts")

    assert detection.department == "manufacturing"
    assert detection.confidence > 0
