"""Intent resolution and message routing.

Resolution is hybrid with strict precedence:

1. an explicit, registered department in the call context always wins;
2. the learned classifier (optional) is trusted only for registered departments;
3. deterministic keyword scoring over department names and descriptions.

The resolver always returns some department. Routing failures are reported as
data in the response, never raised.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from agency_orchestrator.agents.base import BaseAgent
from agency_orchestrator.agents.registry import AgentRegistry, normalize_department
from agency_orchestrator.agents.types import AgentResponse, DetectionMethod, IntentDetection

if TYPE_CHECKING:
    from agency_orchestrator.llm.classifier import IntentClassifier

logger = logging.getLogger(__name__)

UNKNOWN_DEPARTMENT = "unknown"

DEPARTMENT_NAME_WEIGHT = 10
DESCRIPTION_TERM_WEIGHT = 2
MIN_TERM_LENGTH = 4
FULL_CONFIDENCE_SCORE = 15
NO_SIGNAL_CONFIDENCE = 0.1

_TERM_SPLIT = re.compile(r"[^a-z0-9]+")


def description_terms(description: str) -> list[str]:
    """Scoring terms from a description: lower-cased, longer than 3 chars, de-duplicated."""

    seen: dict[str, None] = {}
    for term in _TERM_SPLIT.split(description.lower()):
        if len(term) >= MIN_TERM_LENGTH:
            seen.setdefault(term, None)
    return list(seen)


@dataclass(frozen=True, slots=True)
class KeywordScore:
    department: str
    score: int
    matched_terms: tuple[str, ...]
    name_matched: bool


def mentions_department(message_lower: str, department: str) -> bool:
    """Whole-token match, so "hr" does not fire inside "three"."""

    pattern = rf"(?<![a-z0-9]){re.escape(department)}(?![a-z0-9])"
    return re.search(pattern, message_lower) is not None


def score_agent(message_lower: str, department: str, agent: BaseAgent) -> KeywordScore:
    score = 0
    name_matched = mentions_department(message_lower, department)
    if name_matched:
        score += DEPARTMENT_NAME_WEIGHT

    matched = tuple(term for term in description_terms(agent.description) if term in message_lower)
    score += DESCRIPTION_TERM_WEIGHT * len(matched)
    return KeywordScore(
        department=department, score=score, matched_terms=matched, name_matched=name_matched
    )


def keyword_confidence(score: int) -> float:
    if score <= 0:
        return NO_SIGNAL_CONFIDENCE
    return min(score / FULL_CONFIDENCE_SCORE, 1.0)


class IntentResolver:
    """Decide which registered department should receive a message."""

    def __init__(
        self,
        registry: AgentRegistry,
        classifier: IntentClassifier | None = None,
        *,
        default_department: str | None = None,
        learned_enabled: bool = True,
    ) -> None:
        self._registry = registry
        self._classifier = classifier
        self._default_department = (
            normalize_department(default_department) if default_department else None
        )
        self._learned_enabled = learned_enabled

    @property
    def learned_active(self) -> bool:
        return self._learned_enabled and self._classifier is not None

    async def resolve(
        self, message: str, context: Mapping[str, Any] | None = None
    ) -> IntentDetection:
        forced = self._from_context(context)
        if forced is not None:
            return forced

        if self.learned_active and len(self._registry) > 0:
            learned = await self._from_classifier(message)
            if learned is not None:
                return learned

        return self.resolve_by_keywords(message)

    def _from_context(self, context: Mapping[str, Any] | None) -> IntentDetection | None:
        if not context:
            return None
        requested = context.get("department")
        if not isinstance(requested, str) or not requested.strip():
            return None

        department = normalize_department(requested)
        if not self._registry.has(department):
            logger.info(
                "Context department is not registered; ignoring",
                extra={"department": department},
            )
            return None

        return IntentDetection(
            department=department,
            confidence=1.0,
            reason="Explicit department specified in context",
            method=DetectionMethod.CONTEXT,
        )

    async def _from_classifier(self, message: str) -> IntentDetection | None:
        assert self._classifier is not None
        try:
            result = await self._classifier.classify(message, self._registry.summaries())
        except Exception as e:
            logger.warning(
                "Learned intent detection failed; falling back to keywords",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return None

        department = normalize_department(result.department)
        if not self._registry.has(department):
            logger.warning(
                "Classifier returned an unregistered department; discarding",
                extra={"department": department},
            )
            return None

        return IntentDetection(
            department=department,
            confidence=min(max(result.confidence, 0.0), 1.0),
            reason=result.reasoning,
            method=DetectionMethod.LEARNED,
            action=result.action or None,
            parameters=dict(result.parameters or {}),
        )

    def resolve_by_keywords(self, message: str) -> IntentDetection:
        """Deterministic scoring; ties keep the earliest registered department."""

        message_lower = message.lower()
        best: KeywordScore | None = None
        for department, agent in self._registry.items():
            scored = score_agent(message_lower, department, agent)
            logger.debug(
                "Department scoring",
                extra={
                    "department": department,
                    "score": scored.score,
                    "matched_terms": list(scored.matched_terms),
                },
            )
            if best is None or scored.score > best.score:
                best = scored

        if best is not None and best.score > 0:
            return IntentDetection(
                department=best.department,
                confidence=keyword_confidence(best.score),
                reason=_keyword_reason(best),
                method=DetectionMethod.KEYWORD,
            )

        return IntentDetection(
            department=self._fallback_department(),
            confidence=NO_SIGNAL_CONFIDENCE,
            reason="No specific department detected, using default",
            method=DetectionMethod.KEYWORD,
        )

    def _fallback_department(self) -> str:
        if self._default_department:
            return self._default_department
        departments = self._registry.departments()
        if departments:
            return departments[0]
        return UNKNOWN_DEPARTMENT


def _keyword_reason(scored: KeywordScore) -> str:
    parts: list[str] = []
    if scored.name_matched:
        parts.append(f"department name '{scored.department}'")
    if scored.matched_terms:
        parts.append(f"{len(scored.matched_terms)} term(s): {', '.join(scored.matched_terms)}")
    return f"Score {scored.score} for {scored.department} (matched {'; '.join(parts)})"


@dataclass(frozen=True, slots=True)
class RouterStats:
    registered_departments: list[str]
    total_agents: int
    learned_intent: bool

    def to_json(self) -> dict[str, object]:
        return {
            "registered_departments": list(self.registered_departments),
            "total_agents": self.total_agents,
            "learned_intent": self.learned_intent,
        }


class AgentRouter:
    """Resolve a message and forward it to the winning agent."""

    def __init__(self, registry: AgentRegistry, resolver: IntentResolver) -> None:
        self._registry = registry
        self._resolver = resolver

    async def detect(
        self, message: str, context: Mapping[str, Any] | None = None
    ) -> IntentDetection:
        """Resolve without invoking any agent."""

        return await self._resolver.resolve(message, context)

    async def route(
        self,
        message: str,
        session_id: str,
        context: Mapping[str, Any] | None = None,
    ) -> AgentResponse:
        detection: IntentDetection | None = None
        try:
            detection = await self._resolver.resolve(message, context)
            logger.info(
                "Routing message",
                extra={"session_id": session_id, "preview": message[:100], **_log_fields(detection)},
            )

            agent = self._registry.get(detection.department)
            if agent is None:
                return _unknown_response(
                    session_id,
                    f"No agent found for department: {detection.department}",
                    detection,
                )

            # Extracted parameters override caller context on key collisions.
            forwarded = {**(context or {}), **detection.parameters}
            response = await agent.process_message(message, session_id, forwarded, detection)
        except Exception as e:
            logger.exception("Error routing message", extra={"session_id": session_id})
            return _unknown_response(session_id, f"Error occurred during routing: {e}", detection)

        response.department = response.department or detection.department
        response.detection = detection
        return response

    def stats(self) -> RouterStats:
        departments = self._registry.departments()
        return RouterStats(
            registered_departments=departments,
            total_agents=len(departments),
            learned_intent=self._resolver.learned_active,
        )

    def capabilities(self) -> dict[str, str]:
        return self._registry.capabilities()


def _log_fields(detection: IntentDetection) -> dict[str, object]:
    return {
        "department": detection.department,
        "confidence": detection.confidence,
        "method": detection.method.value,
    }


def _unknown_response(
    session_id: str, reason: str, detection: IntentDetection | None
) -> AgentResponse:
    method = detection.method if detection is not None else DetectionMethod.KEYWORD
    return AgentResponse(
        message=f"Sorry, I couldn't route your request: {reason}",
        session_id=session_id,
        department=UNKNOWN_DEPARTMENT,
        detection=IntentDetection(
            department=UNKNOWN_DEPARTMENT,
            confidence=0.0,
            reason=reason,
            method=method,
        ),
    )
